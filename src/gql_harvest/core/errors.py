class QueryExtractionError(Exception):
    """A tagged query template that cannot be turned into GraphQL definitions."""

    def __init__(self, message: str, file_path: str, offset: int) -> None:
        super().__init__(message)
        self.file_path = file_path
        self.offset = offset


class StringInterpolationNotAllowedError(QueryExtractionError):
    def __init__(self, file_path: str, offset: int) -> None:
        super().__init__(
            "String interpolations are not allowed in graphql "
            "fragments. Included fragments should be referenced as `...MyModule_foo`.",
            file_path,
            offset,
        )


class EmptyGraphQLTagError(QueryExtractionError):
    def __init__(self, file_path: str, offset: int) -> None:
        super().__init__("Unexpected empty graphql tag.", file_path, offset)


class GraphQLSyntaxError(QueryExtractionError):
    def __init__(self, text: str, cause: Exception, file_path: str, offset: int) -> None:
        super().__init__(f"GraphQL syntax error in query:\n\n{text}\n\nmessage:\n\n{cause}", file_path, offset)
        self.text = text
