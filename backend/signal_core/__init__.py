"""Core streaming signal engine (pure logic, no I/O).

This package contains the rolling price history, incremental indicators,
the signal decision state machine and the paper-trading simulator. It has
no database, filesystem or network dependencies and is shared by the HTTP
host (signal_app/) and the offline replay tool (replay/).
"""
