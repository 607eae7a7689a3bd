"""Root GraphQL schema combining the import and activation surfaces."""

from __future__ import annotations

import graphene

from .activation.schema import ActivationMutations, ActivationQuery
from .importing.schema import ImportMutations, ImportQuery


class Query(ImportQuery, ActivationQuery, graphene.ObjectType):
    pass


class Mutation(ImportMutations, ActivationMutations, graphene.ObjectType):
    pass


schema = graphene.Schema(query=Query, mutation=Mutation)
