"""tablelog.cli — command line over tablelog.io (versions, show, checkpoint)."""
