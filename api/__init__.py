"""HTTP routers for the interview practice API."""
