"""API glue code for the foreman_provider package.

Entities are pydantic models (see `foreman_provider.api.models`) that know
how to encode themselves for the Foreman API and decode its responses,
so callers only ever handle validated, typed data.

NOTE: this module must not import from `api.models` or `api.abstracts`;
`utilities.api` imports `api.errors`, and the models import `utilities.api`.
"""
