"""
Test suite for the content synchronization components.

- BaseDirectoryResolver inference and validation
- Identifier generation and slug rules
- FileIdentityIndex bookkeeping
- Eager and lazy module providers
- SyncEngine bulk, change and unlink handling
- WatchEventRouter and watcher event conversion
"""
