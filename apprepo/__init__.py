"""apprepo — an application installation registry.

Lets an origin install, enumerate and remove web application manifests
keyed by launch URL, and records who installed what, and when.
"""

__version__ = "0.1.0"
