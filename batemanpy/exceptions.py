class DecayChainError(ValueError):
    """Base class for data-shape errors that stop a decay calculation."""


class CyclicDecayChainError(DecayChainError):
    """
    Raised when the decay network contains a cycle.

    Attributes
    ----------
    nuclides : list of str
        Sorted names of the nuclides left in the graph once no leaf could be
        removed anymore. Every cycle runs through these nuclides.
    """

    def __init__(self, nuclides):
        self.nuclides = sorted(nuclides)
        super().__init__(
            "The decay chain contains a cycle between the nuclides: "
            f"{', '.join(self.nuclides)}"
        )


class UnknownNuclideError(DecayChainError, KeyError):
    """Raised when a nuclide is referenced but has no data in the registry."""

    def __init__(self, name, referenced_by=None):
        self.name = name
        self.referenced_by = referenced_by
        if referenced_by is None:
            message = f"Nuclide not found in data: {name}"
        else:
            message = f"Nuclide not found in data: {name} (daughter of {referenced_by})"
        super().__init__(message)

    def __str__(self):
        # KeyError would wrap the message in quotes
        return self.args[0]
