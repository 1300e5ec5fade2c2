"""Exception types raised by crnsim."""


class ReactionNetworkError(ValueError):
    """
    Raised when a reaction network is inconsistent, e.g. reactions sized for a
      different number of species, duplicated species names, or rate
      expressions that use undeclared parameters.
    """


class DSLParseError(ReactionNetworkError):
    """
    Raised when a line of the reaction-network notation cannot be parsed.
      The message names the offending line.
    """


class ProblemDefinitionError(ValueError):
    """
    Raised when a simulation problem is given an initial state, parameter
      vector or time span that does not fit its network.
    """


class SolverError(RuntimeError):
    """
    Raised when a simulation cannot be carried to the end of its time span.
    """
