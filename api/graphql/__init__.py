"""GraphQL API package"""

from api.graphql.schema import graphql_router, schema

__all__ = ["graphql_router", "schema"]
