"""Bundled default template and presets."""

from __future__ import annotations

from memsync.memory.codec import Document, Item, Section

_USER_INFO_DESCRIPTION = "Use this information if you need to reference them directly"
_RESPONSE_STYLE_DESCRIPTION = "Use this in every response"


def default_document() -> Document:
    return Document(
        sections=[
            Section(
                title="User Information",
                description=_USER_INFO_DESCRIPTION,
                items=[
                    Item("Name", "Default User"),
                    Item("Location", "Default Location"),
                ],
            ),
            Section(
                title="General Response Style",
                description=_RESPONSE_STYLE_DESCRIPTION,
                items=[Item("Style", "Concise and friendly")],
            ),
        ]
    )


def _dave() -> Document:
    return Document(
        sections=[
            Section(
                title="User Information",
                description=_USER_INFO_DESCRIPTION,
                items=[
                    Item("Name", "Dave"),
                    Item("Age", "30"),
                    Item("Location", "Birmingham"),
                    Item("Likes", "Football, Drums, Golf"),
                ],
            ),
            Section(
                title="General Response Style",
                description=_RESPONSE_STYLE_DESCRIPTION,
                items=[
                    Item("Use UK English Spellings", "true"),
                    Item(
                        "Use £ (GBP) as the default currency",
                        "if you need to use conversions put them in brackets i.e. £1.10 ($1.80)",
                    ),
                    Item("You can be very concise", "true"),
                    Item("Always double check references and provide links to sources", "true"),
                ],
            ),
            Section(
                title="Coding Preferences",
                description="General Preferences when responding to coding questions",
                items=[
                    Item("Provide visuals to support logic explanations", "true"),
                    Item(
                        'Maintain and update a "Project Variables" document',
                        "so that it is easy to track what variables are being used in the projects",
                    ),
                ],
            ),
        ]
    )


def _abi() -> Document:
    return Document(
        sections=[
            Section(
                title="User Information",
                description=_USER_INFO_DESCRIPTION,
                items=[
                    Item("Name", "Abi Thomas"),
                    Item("Age", "27"),
                    Item("Platforms", "Android Phone, iPad, Windows work laptop"),
                ],
            ),
            Section(
                title="General Response Style",
                description=_RESPONSE_STYLE_DESCRIPTION,
                items=[
                    Item("Respond in English or Welsh", "true"),
                    Item("Give examples using metaphors", "true"),
                ],
            ),
            Section(
                title="Cooking Preferences",
                description="General Preferences when responding to cooking questions",
                items=[
                    Item("Use Celsius", "true"),
                    Item("Don't bother with seconds", "give responses with minutes and hours only"),
                ],
            ),
        ]
    )


DEFAULT_PRESETS = {
    "dave": _dave,
    "abi": _abi,
}
