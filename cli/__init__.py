"""Terminal dashboard client for the canal ice monitor API."""
