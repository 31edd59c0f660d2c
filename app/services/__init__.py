# Services package.
#
# One module per resource, each a set of async functions that sequence a
# request: validate path identifiers, pre-check the payload, fetch the
# current row, run the integrity checks and the reconciler, then persist:
#
#   post_service    : CRUD + substring search for Post
#   comment_service : CRUD for Comment, scoped to a parent Post
#   user_service    : CRUD for User, addressed by username
#
# Every function takes a ``Store`` as its first argument and returns
# either the response data or a ``Rejection``.  The transaction boundary
# belongs to the ``get_db`` dependency in the router layer.
