"""
The MODEL layer contains pure data structures: event records, the decoded
topology and the application state, plus feed I/O.
It has NO knowledge of the GUI (Qt).
"""
