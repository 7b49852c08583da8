"""
Services — multi-step flows built on the repositories.

Services may span several repositories and call the partner API.  Unless
a function says otherwise, the caller owns the transaction.
"""
