"""verbground

Verbs to manipulate tables, built from scratch for learning and teaching purposes.

verbground shows how the verbs commonly found in data-manipulation
libraries (arrange, filter, distinct, sample, select, rename, mutate, transmute)
can be implemented on top of a small query-plan compute engine
based on Apache Arrow.

The project is constituted by multiple components, each isolated within its own
package and each self documented in literate programming style.

The primary components are:

* The Compute Engine, in charge of executing the query plans on the data.
* The Dataframe API, which exposes the verbs on top of the compute engine.
* The Formula support, which allows to write expressions as text.
* The ``verbground`` command, which applies verbs to files from the shell.

For the user guide and code documentation of each component, refer to the
component itself.
"""

from . import compute, dataframe, datasets, formula

__all__ = ("compute", "dataframe", "datasets", "formula")
