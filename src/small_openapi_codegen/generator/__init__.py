"""Model assembly -- turn a resolved document into what templates consume.

This sub-package is responsible for the second half of the pipeline: taking
the dereferenced document produced by :mod:`~small_openapi_codegen.parser`
and exposing it in the shapes code templates work with.

Typical usage::

    import asyncio

    from small_openapi_codegen.generator import flatten_operations, read_spec

    spec = asyncio.run(read_spec("petstore.yaml"))
    for operation in flatten_operations(spec.paths, spec.servers):
        print(operation.method.value, operation.path)

Sub-modules:

* :mod:`~small_openapi_codegen.generator.operations` -- Flatten ``paths``
  into one record per operation with merged parameters.
* :mod:`~small_openapi_codegen.generator.properties` -- Project object
  schemas into property descriptors and inspect bodies by media type.
* :mod:`~small_openapi_codegen.generator.naming` -- Casing helpers and
  option defaults derived from the spec file name.
* :mod:`~small_openapi_codegen.generator.assembly` -- :func:`read_spec`,
  the entry point producing an :class:`~small_openapi_codegen.models.ApiSpec`.
"""

from small_openapi_codegen.generator.assembly import read_spec
from small_openapi_codegen.generator.naming import resolve_options
from small_openapi_codegen.generator.operations import flatten_operations, method_name
from small_openapi_codegen.generator.properties import project_properties

__all__ = [
    "read_spec",
    "resolve_options",
    "flatten_operations",
    "method_name",
    "project_properties",
]
