"""
Error handling for ptaflow analyses.

Fatal conditions abort the analysis run by raising one of the exceptions
below.  Conditions that the analyses model inside their lattices (such as a
constant division by zero) are never reported through exceptions.
"""


class AnalysisError(Exception):
    """Base class of every error raised by an analysis run."""
    pass


class UnresolvedMethodError(AnalysisError):
    """
    Raised when dispatch finds no target for a method reference.

    Attributes:
        methodRef: The method reference that could not be resolved
        receiverType: The type dispatch started from (None for static calls)
    """

    def __init__(self, methodRef, receiverType=None):
        self.methodRef = methodRef
        self.receiverType = receiverType
        if receiverType is None:
            msg = "cannot resolve %s" % (methodRef,)
        else:
            msg = "cannot resolve %s on %s" % (methodRef, receiverType)
        AnalysisError.__init__(self, msg)


class ArityMismatchError(AnalysisError):
    """
    Raised when the actual and formal parameter counts of a call edge differ.

    Attributes:
        callSite: The invoke statement
        callee: The target method
    """

    def __init__(self, callSite, callee, actuals, formals):
        self.callSite = callSite
        self.callee = callee
        AnalysisError.__init__(
            self,
            "%s passes %d arguments to %s, which declares %d parameters"
            % (callSite, actuals, callee, formals),
        )


class ConfigurationError(AnalysisError):
    """Raised for malformed or unknown analysis options."""
    pass


class InternalError(AnalysisError):
    """
    Raised when the program model violates an invariant the analyses rely
    on, e.g. a statement class no visitor knows about.
    """
    pass


class AnalysisAbort(AnalysisError):
    """Raised by a driver-imposed bound to stop an analysis run early."""
    pass


def abort(msg=None):
    """
    Abort the current analysis run.

    Raises:
        AnalysisAbort: Always
    """
    raise AnalysisAbort(msg)
