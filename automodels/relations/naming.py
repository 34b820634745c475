"""String helpers for relation and class names."""

import re

import inflect

p = inflect.engine()


def ucfirst(value: str) -> str:
    return value[:1].upper() + value[1:]


def studly(value: str) -> str:
    """``user_roles`` -> ``UserRoles``."""
    return "".join(ucfirst(part) for part in re.split(r"[-_\s]+", value) if part)


def camel(value: str) -> str:
    """``user_roles`` -> ``userRoles``."""
    studly_value = studly(value)
    return studly_value[:1].lower() + studly_value[1:]


def snake(value: str, delimiter: str = "_") -> str:
    """``PostsWhereAuthor`` -> ``posts_where_author``."""
    if value.islower():
        return value
    value = "".join(ucfirst(word) for word in value.split())
    return re.sub(r"(.)(?=[A-Z])", r"\1" + delimiter, value).lower()


def _singular_of_plural(word: str):
    # singular_noun() strips any trailing "s" ("address" -> "addres"), so only
    # trust it when pluralizing the result gives the word back.
    singular_word = p.singular_noun(word)
    if singular_word and p.plural_noun(singular_word) == word:
        return singular_word
    return None


def singular(word: str) -> str:
    if not word:
        return word
    return _singular_of_plural(word) or word


def plural(word: str) -> str:
    """Plural of ``word``, leaving words that are already plural alone."""
    if not word or _singular_of_plural(word):
        return word
    return p.plural_noun(word)


def strip_suffix_from_foreign_key(uses_snake: bool, primary_key: str, foreign_key: str) -> str:
    """Remove the referenced key name from the end of a foreign key.

    ``author_id`` -> ``author`` in snake mode, ``authorId`` -> ``author``
    otherwise.
    """
    if not primary_key:
        return foreign_key

    if uses_snake:
        pattern = r"(_)(%s|%s)$" % (re.escape(primary_key), re.escape(primary_key.lower()))
    else:
        pattern = r"(%s|%s)$" % (re.escape(primary_key), re.escape(studly(primary_key)))

    return re.sub(pattern, "", foreign_key, count=1)
