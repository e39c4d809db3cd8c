# Sphinx configuration for the rtmodelingsuite API reference.
#
# Project metadata and extension settings live in pyproject.toml under
# [tool.sphinx-pyproject]; see https://www.sphinx-doc.org/en/master/usage/configuration.html

from sphinx_pyproject import SphinxConfig

config = SphinxConfig("../pyproject.toml", globalns=globals())
html_title = f"rtmodelingsuite {config.version}"
