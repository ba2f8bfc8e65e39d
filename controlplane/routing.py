"""
Typed path parameters.

Client and check names are restricted to word characters, dots and dashes.
Registering them as a Starlette convertor makes a non-matching segment fail
to route (404) instead of reaching the handler and failing validation (422).

Routers declare them as ``{client_name:name}``. Stash paths use the built-in
``path`` convertor and may contain slashes.
"""

from starlette.convertors import Convertor, register_url_convertor


class NameConvertor(Convertor):
    regex = r"[\w.-]+"

    def convert(self, value: str) -> str:
        return value

    def to_string(self, value: str) -> str:
        return value


register_url_convertor("name", NameConvertor())
