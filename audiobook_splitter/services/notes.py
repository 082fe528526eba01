"""Flashcard deck export.

Builds an Anki package (``.apkg``) with one note per clip. Each note carries
the sound tag, the cover image and the sentence, and the package bundles the
clips and the cover as media so it can be imported as is.
"""
from __future__ import annotations

import logging
import os
import time
from typing import List, Optional, Sequence

import genanki

from audiobook_splitter.core import Interval
from .segments import clip_exists, output_path_for

logger = logging.getLogger(__name__)

NOTE_MODEL = genanki.Model(
    170655988708,
    'audiobook-splitter',
    fields=[
        {'name': 'Audio'},
        {'name': 'Image'},
        {'name': 'Sentence'},
    ],
    templates=[
        {
            'name': 'Card 1',
            'qfmt': '{{Sentence}}',
            'afmt': '{{FrontSide}}<hr id="answer">{{Audio}} {{Image}}',
        },
    ],
)


def build_note_fields(ordinal: int, interval: Interval, prefix: str, extension: str = "mp3",
                      cover_name: Optional[str] = None) -> List[str]:
    sound = f"[sound:{prefix}-{ordinal}.{extension}]"
    image = f'<img src="{cover_name}">' if cover_name else ""
    sentence = interval.text.replace("\r\n", "\n").replace("\n", "<br>")
    return [sound, image, sentence]


def build_package(intervals: Sequence[Interval], clip_dir: str, prefix: str,
                  extension: str = "mp3", cover_path: Optional[str] = None,
                  deck_id: Optional[int] = None) -> genanki.Package:
    """Build the deck for ``intervals`` and collect the media to bundle.

    Clips missing from ``clip_dir`` (failed or cancelled) keep their note
    but are left out of the media list.
    """
    if deck_id is None:
        deck_id = int(time.time() * 1000)
    deck = genanki.Deck(deck_id, prefix, description=f"{prefix} - Generated by audiobook-splitter")

    cover_name = os.path.basename(cover_path) if cover_path else None
    media: List[str] = []
    for ordinal, interval in enumerate(intervals, start=1):
        deck.add_note(genanki.Note(
            model=NOTE_MODEL,
            fields=build_note_fields(ordinal, interval, prefix, extension, cover_name),
        ))
        clip = output_path_for(clip_dir, prefix, ordinal, extension)
        if clip_exists(clip):
            media.append(clip)
        else:
            logger.warning("Clip %s missing, not bundled", clip)

    if cover_path:
        media.append(cover_path)
    return genanki.Package(deck, media_files=media)


def write_notes(output_path: str, intervals: Sequence[Interval], clip_dir: str, prefix: str,
                extension: str = "mp3", cover_path: Optional[str] = None) -> str:
    """Write the ``.apkg`` package to ``output_path`` and return the path."""
    package = build_package(intervals, clip_dir, prefix, extension, cover_path)
    package.write_to_file(output_path)
    logger.info("Wrote %d notes and %d media files to %s",
                len(intervals), len(package.media_files), output_path)
    return output_path
