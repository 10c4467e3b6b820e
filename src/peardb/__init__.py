"""PearDB - browse the AppleDB catalog and record your Apple hardware."""
