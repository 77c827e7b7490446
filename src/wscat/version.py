"""Package version.

Bump rules:
- Patch (0.1.x): bug fixes, diagnostic wording
- Minor (0.x.0): new flags, new settings
- Major (x.0.0): changes to exit codes or success semantics
"""

VERSION = "0.1.0"
