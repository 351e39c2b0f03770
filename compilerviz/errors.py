"""
Error types raised by the compiler-visualizer core.

Every error carries a short message that is safe to show to a browser
client and the HTTP status the web layer answers with.
"""


class CompilerVizError(Exception):
    status_code = 500
    message = "Compilation visualizer error"

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class EmptyInput(CompilerVizError):
    status_code = 400
    message = "No source code provided"


class InvalidRequest(CompilerVizError):
    status_code = 400
    message = "Invalid request"


class InvalidArtifactOrFormat(InvalidRequest):
    message = "Invalid download type"


class SessionNotFound(CompilerVizError):
    status_code = 404
    message = "Compilation result not found"


class InvalidStep(CompilerVizError):
    status_code = 400
    message = "Invalid step"


class StorageFailure(CompilerVizError):
    status_code = 500
    message = "Compilation result could not be read"


class MalformedIR(CompilerVizError):
    status_code = 500
    message = "Intermediate code references an unknown label"
