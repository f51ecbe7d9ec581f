"""Author identity resolution"""

from .author_resolver import AuthorResolver, DisplayNameCache
