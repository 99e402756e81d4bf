"""
Symbolic icon references.

The engine only carries icon names as strings. At the rendering boundary they are
mapped to a closed set of ``IconRef`` values through ``resolve_icon``; anything
not recognised falls back to ``IconRef.HOME``.
"""

from __future__ import annotations

from enum import Enum
import re
from typing import Mapping


class IconRef(str, Enum):
    HOME = "home"
    USERS = "users"
    USER = "user"
    USER_PLUS = "user-plus"
    USER_MINUS = "user-minus"
    USER_GROUP = "user-group"
    BUILDING = "building"
    CURRENCY = "currency"
    CALCULATOR = "calculator"
    SHOPPING_CART = "shopping-cart"
    CHAT = "chat"
    DOCUMENT = "document"
    DOCUMENT_CHECK = "document-check"
    FOLDER = "folder"
    ARCHIVE = "archive"
    CUBE = "cube"
    CHART_BAR = "chart-bar"
    CHART_PIE = "chart-pie"
    CLIPBOARD = "clipboard"
    CLIPBOARD_CHECK = "clipboard-check"
    CALENDAR = "calendar"
    CLOCK = "clock"
    CHECK = "check"
    SHIELD = "shield"
    COG = "cog"
    WRENCH = "wrench"
    MEGAPHONE = "megaphone"
    BELL = "bell"
    WALLET = "wallet"
    RECEIPT = "receipt"
    GIFT = "gift"
    TICKET = "ticket"
    UPLOAD = "upload"
    SCALE = "scale"
    BRIEFCASE = "briefcase"


# Heroicons / react-icons component names used by the front-end registries.
_ALIASES: Mapping[str, IconRef] = {
    "hioutlinehome": IconRef.HOME,
    "homeicon": IconRef.HOME,
    "usersicon": IconRef.USERS,
    "hioutlineusers": IconRef.USERS,
    "usericon": IconRef.USER,
    "userplusicon": IconRef.USER_PLUS,
    "userminusicon": IconRef.USER_MINUS,
    "usergroupicon": IconRef.USER_GROUP,
    "hioutlineusergroup": IconRef.USER_GROUP,
    "buildingofficeicon": IconRef.BUILDING,
    "buildingoffice2icon": IconRef.BUILDING,
    "currencydollaricon": IconRef.CURRENCY,
    "hioutlinecurrencydollar": IconRef.CURRENCY,
    "calculatoricon": IconRef.CALCULATOR,
    "shoppingcarticon": IconRef.SHOPPING_CART,
    "chatbubbleleftrighticon": IconRef.CHAT,
    "hioutlinechat": IconRef.CHAT,
    "documenticon": IconRef.DOCUMENT,
    "documenttexticon": IconRef.DOCUMENT,
    "hioutlinedocumenttext": IconRef.DOCUMENT,
    "documentcheckicon": IconRef.DOCUMENT_CHECK,
    "foldericon": IconRef.FOLDER,
    "hioutlinefolder": IconRef.FOLDER,
    "archiveboxicon": IconRef.ARCHIVE,
    "hioutlinearchive": IconRef.ARCHIVE,
    "cubeicon": IconRef.CUBE,
    "hioutlinecube": IconRef.CUBE,
    "chartbaricon": IconRef.CHART_BAR,
    "hioutlinechartbar": IconRef.CHART_BAR,
    "chartpieicon": IconRef.CHART_PIE,
    "clipboarddocumentlisticon": IconRef.CLIPBOARD,
    "clipboarddocumentcheckicon": IconRef.CLIPBOARD_CHECK,
    "calendardaysicon": IconRef.CALENDAR,
    "calendaricon": IconRef.CALENDAR,
    "clockicon": IconRef.CLOCK,
    "checkicon": IconRef.CHECK,
    "shieldcheckicon": IconRef.SHIELD,
    "hioutlineshieldcheck": IconRef.SHIELD,
    "cog6toothicon": IconRef.COG,
    "cogicon": IconRef.COG,
    "wrenchscrewdrivericon": IconRef.WRENCH,
    "megaphoneicon": IconRef.MEGAPHONE,
    "bellicon": IconRef.BELL,
    "walleticon": IconRef.WALLET,
    "receiptpercenticon": IconRef.RECEIPT,
    "gifticon": IconRef.GIFT,
    "ticketicon": IconRef.TICKET,
    "cloudarrowupicon": IconRef.UPLOAD,
    "scaleicon": IconRef.SCALE,
    "briefcaseicon": IconRef.BRIEFCASE,
}

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def resolve_icon(name: str | None) -> IconRef:
    """Map a registry icon name to an ``IconRef`` (``IconRef.HOME`` when unknown)."""

    if not name:
        return IconRef.HOME
    candidate = name.strip().lower()
    try:
        return IconRef(candidate)
    except ValueError:
        pass
    return _ALIASES.get(_NON_ALNUM_RE.sub("", candidate), IconRef.HOME)
