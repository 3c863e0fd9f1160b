"""Built-in CLI sub-commands for apicol.

* :mod:`~apicol.commands.convert` -- import a document and write the
  collection as JSON or YAML.
* :mod:`~apicol.commands.inspect` -- summarise, list requests, or list
  environments of the collection a document imports to.
* :mod:`~apicol.commands.config` -- view and modify global settings.

``convert`` is a plain callback registered directly on the root app; the
multi-command groups export a :class:`typer.Typer` sub-application.
"""
