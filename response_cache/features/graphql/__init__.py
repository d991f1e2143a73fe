"""GraphQL feature: Strawberry integration of the response cache."""
