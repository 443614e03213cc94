"""MiniTwit: a small micro-blogging service."""
