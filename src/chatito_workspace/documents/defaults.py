"""Built-in document set used when nothing has been persisted yet."""

from __future__ import annotations

from .model import Document

__all__ = ["default_documents"]

_COMMON = """\
# Shared aliases and slots, imported by the intent files.

~[hi]
    hi
    hello
    hey there

~[please]
    please
    could you

@[city]
    ~[new york]
    San Francisco
    Atlanta

~[new york]
    new york
    nyc
"""

_FIND_RESTAURANTS = """\
import ./common.chatito

%[findRestaurantsByCity]('training': '100', 'testing': '20')
    ~[hi?] ~[please?] find me restaurants in @[city]
    ~[please?] where can I eat in @[city]
    show me places to eat near @[city]

%[greet]('training': '10')
    ~[hi]
    ~[hi] ~[please?] help me
"""


def default_documents() -> list[Document]:
    """Return a fresh copy of the example workspace."""

    return [
        Document(title="findRestaurantsByCity.chatito", text=_FIND_RESTAURANTS),
        Document(title="common.chatito", text=_COMMON),
    ]
