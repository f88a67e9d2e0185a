"""HTTP API for PersonaBrief."""
