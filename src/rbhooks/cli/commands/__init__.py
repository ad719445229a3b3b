"""Command implementations behind the rb_* console scripts."""
