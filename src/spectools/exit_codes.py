"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~spectools.exceptions.SpectoolsError` subclass.
Scripts that wrap the CLI can inspect the exit code to tell a broken
document apart from a missing file without parsing stderr.

Example::

    $ spectools convert api.yaml
    $ echo $?
    9   # EXIT_CYCLIC_REFERENCE -- the document contains a $ref cycle
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SPEC_LOAD_ERROR = 6
"""The document could not be read or decoded (missing file, bad extension, HTTP failure)."""

EXIT_SPEC_ERROR = 7
"""The OpenAPI document was read but could not be converted into tool descriptors."""

EXIT_UNSUPPORTED_VERSION = 8
"""The document does not declare a supported OpenAPI 3.0.x version."""

EXIT_CYCLIC_REFERENCE = 9
"""A ``$ref`` cycle or a pathologically deep document exhausted the visitor."""
