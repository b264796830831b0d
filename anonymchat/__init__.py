"""AnonymChat: anonymous forum with threaded messages and polls."""
