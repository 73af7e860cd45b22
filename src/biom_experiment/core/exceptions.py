"""Exceptions raised while converting biom tables."""

# import name -> distribution name on the package index
_INSTALL_NAMES = {"biom": "biom-format"}


class BiomExperimentError(Exception):
    """Base class for errors raised by biom_experiment."""


class DependencyMissingError(BiomExperimentError, ImportError):
    """An optional third-party package needed for the operation is not
    installed."""

    def __init__(self, package: str):
        install_name = _INSTALL_NAMES.get(package, package)
        super().__init__(
            f"The '{package}' package is required for this operation; "
            f"install it with 'pip install {install_name}'"
        )
        self.package = package


class InvalidInputTypeError(BiomExperimentError, TypeError):
    """The object handed to a converter is not a decoded biom table."""
