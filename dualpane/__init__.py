"""dualpane: browse local and remote files side by side and upload them."""
