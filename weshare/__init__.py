"""WeShare Rwanda: carpooling, bus tickets and driver verification API."""
