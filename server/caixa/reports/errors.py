"""Error taxonomy for the reporting engine.

``ValidationError`` is raised before any storage query is issued.
``UpstreamError`` wraps storage failures so a failed read is never mistaken
for an empty period. ``NotFoundError`` is reserved for unknown tenants:
a period without transactions yields zeroed aggregates instead.
"""


class ReportError(Exception):
    pass


class ValidationError(ReportError, ValueError):
    pass


class NotFoundError(ReportError, LookupError):
    pass


class UpstreamError(ReportError):
    pass
