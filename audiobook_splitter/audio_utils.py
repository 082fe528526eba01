"""
Utilità per preparare l'audiolibro prima della divisione in clip
"""
import logging
import os

from pydub.utils import mediainfo

from .services.errors import ConversionError, ExternalToolError
from .services.ffmpeg import run_ffmpeg

logger = logging.getLogger(__name__)

# Contenitori che ffmpeg non può copiare direttamente in clip mp3
CONVERT_EXTENSIONS = ('.m4b',)

# Tolleranza in secondi tra la durata della sorgente e quella convertita
DURATION_TOLERANCE = 1.0


def needs_conversion(audio_path):
    return os.path.splitext(audio_path)[1].lower() in CONVERT_EXTENSIONS


def probe_duration(audio_path):
    """Durata in secondi letta con ffprobe, None se non disponibile"""
    try:
        duration = mediainfo(audio_path).get('duration')
        return float(duration) if duration else None
    except (OSError, ValueError) as e:
        logger.warning("Cannot probe %s: %s", audio_path, e)
        return None


def convert_to_mp3(audio_path, output_path, ffmpeg='ffmpeg', timeout=None):
    """
    Converte l'intero file audio in mp3 in streaming con ffmpeg

    Il risultato viene scritto in un file temporaneo e rinominato solo a
    conversione riuscita, così un mp3 troncato non resta mai accanto alla
    sorgente.

    Args:
        audio_path: Percorso del file sorgente
        output_path: Percorso dell'mp3 da scrivere
        ffmpeg: Eseguibile di ffmpeg
        timeout: Secondi massimi per la conversione (None = nessun limite)
    """
    logger.info("Converting %s to mp3, this may take a few minutes", audio_path)
    partial_path = output_path + '.part'
    try:
        run_ffmpeg(
            ['-hide_banner', '-loglevel', 'error', '-y', '-i', audio_path,
             '-vn', '-acodec', 'libmp3lame', '-f', 'mp3', partial_path],
            ffmpeg=ffmpeg,
            timeout=timeout,
        )
        expected = probe_duration(audio_path)
        actual = probe_duration(partial_path)
        if expected is not None and actual is not None and actual < expected - DURATION_TOLERANCE:
            raise ConversionError(f"Converted audio is truncated: {actual:.1f}s of {expected:.1f}s")
        os.replace(partial_path, output_path)
    except (ExternalToolError, ConversionError, OSError) as e:
        logger.error("Conversion of %s failed: %s", audio_path, e)
        if os.path.exists(partial_path):
            os.remove(partial_path)
        if isinstance(e, ConversionError):
            raise
        raise ConversionError(str(e)) from e
    return output_path


def ensure_splittable_audio(audio_path, convert=True, ffmpeg='ffmpeg', timeout=None):
    """
    Restituisce il percorso da dividere e se è stato creato qui

    Gli audiolibri ``.m4b`` vengono convertiti una sola volta in un mp3
    accanto alla sorgente; un mp3 di un'esecuzione precedente viene riusato.
    """
    if not convert or not needs_conversion(audio_path):
        return audio_path, False
    converted_path = os.path.splitext(audio_path)[0] + '.mp3'
    if os.path.exists(converted_path):
        logger.info("Reusing converted audio %s", converted_path)
        return converted_path, False
    convert_to_mp3(audio_path, converted_path, ffmpeg=ffmpeg, timeout=timeout)
    return converted_path, True
