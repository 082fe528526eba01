"""
Interfaccia a riga di comando per lo splitter di audiolibri
"""
import argparse
import logging
import os
import queue
import threading

from .audio_utils import ensure_splittable_audio
from .config import Config
from .core import build_intervals, format_clock
from .services.assets import extract_cover
from .services.dispatcher import run_segmentation
from .services.errors import CoverExtractionError, SplitterError
from .services.notes import write_notes
from .services.progress import RunContext
from .services.segments import ActionKind, output_path_for, plan_segment
from .services.transcript import load_cues

logger = logging.getLogger(__name__)


def print_dry_run(intervals, clip_dir, prefix, extension='mp3'):
    """Print every interval and the action a real run would take."""
    print(f"\nIntervals ({len(intervals)}):")
    counts = {kind: 0 for kind in ActionKind}
    for ordinal, interval in enumerate(intervals, start=1):
        path = output_path_for(clip_dir, prefix, ordinal, extension)
        action = plan_segment(ordinal, interval, path)
        counts[action.kind] += 1
        print(f"#{ordinal} [{format_clock(interval.start)} -> {format_clock(interval.end)}] "
              f"{action.kind.value}: {os.path.basename(path)}")
    print("\n" + "=" * 60)
    print(", ".join(f"{kind.value}={n}" for kind, n in counts.items()))
    print("=" * 60)


def _print_progress(channel, worker, poll=0.5):
    """Stampa i messaggi di avanzamento fino alla fine dell'esecuzione"""
    while True:
        try:
            message = channel.receive(timeout=poll)
        except queue.Empty:
            if worker.is_alive():
                continue
            return
        if message is None:
            return
        print(message, end='')


def split_with_progress(intervals, audio_path, prefix, clip_dir, config, context=None):
    """Esegue la divisione in un thread separato e ne stampa l'avanzamento.

    Ctrl+C chiede ai worker di fermarsi dopo il chunk corrente.
    """
    context = context or RunContext()
    result = {}

    def _run():
        try:
            result['summary'] = run_segmentation(
                intervals,
                audio_path=audio_path,
                prefix=prefix,
                output_dir=clip_dir,
                context=context,
                chunk_size=config.get('chunk_size'),
                workers=config.get('workers'),
                extension=config.get('extension', 'mp3'),
                ffmpeg=config.get('ffmpeg', 'ffmpeg'),
                timeout=config.get('tool_timeout'),
                loglevel=config.get('ffmpeg_options', {}).get('loglevel', 'error'),
            )
        except SplitterError as e:
            result['error'] = e
        finally:
            context.channel.close()

    worker = threading.Thread(target=_run, name='segmentation', daemon=True)
    worker.start()
    # Ctrl+C ripetuti non devono mai saltare il join del worker
    while True:
        try:
            _print_progress(context.channel, worker)
            break
        except KeyboardInterrupt:
            if context.cancelled:
                print("\nStill waiting for the running chunks to finish...")
            else:
                print("\nShutting down, waiting for the running chunks to finish...")
                context.cancel()
    worker.join()

    if 'error' in result:
        raise result['error']
    return result['summary']


def process_audiobook(config, dry_run=False):
    """Divide un audiolibro come descritto da ``config``. Restituisce l'exit code."""
    audio_path = config.get('audio')
    subtitle_path = config.get('subtitle')
    prefix = config.get('prefix') or os.path.splitext(os.path.basename(audio_path))[0]
    extension = config.get('extension', 'mp3')
    clip_dir = os.path.join(config.get('output_dir', './gen'), prefix)

    cues = load_cues(subtitle_path)
    intervals = build_intervals(cues, config.get('start_offset', 0), config.get('end_offset', 0))
    print(f"Loaded {len(cues)} cues from {subtitle_path}")

    if dry_run:
        print_dry_run(intervals, clip_dir, prefix, extension)
        return 0

    split_path, converted = ensure_splittable_audio(
        audio_path,
        config.get('convert_m4b', True),
        ffmpeg=config.get('ffmpeg', 'ffmpeg'),
        timeout=config.get('tool_timeout'),
    )
    try:
        cover_path = None
        if config.get('extract_cover', True):
            os.makedirs(clip_dir, exist_ok=True)
            try:
                cover_path = extract_cover(
                    audio_path,
                    os.path.join(clip_dir, f"{prefix}.jpg"),
                    ffmpeg=config.get('ffmpeg', 'ffmpeg'),
                    timeout=config.get('tool_timeout'),
                )
            except CoverExtractionError as e:
                logger.warning("No cover extracted: %s", e)

        summary = split_with_progress(intervals, split_path, prefix, clip_dir, config)
    finally:
        if converted and not config.get('keep_converted', False):
            logger.info("Removing converted audio %s", split_path)
            os.remove(split_path)

    if config.get('write_notes', True):
        write_notes(
            os.path.join(clip_dir, f"{prefix}.apkg"),
            intervals,
            clip_dir,
            prefix,
            extension,
            cover_path,
        )

    print(f"\n{'=' * 60}")
    print(f"Clips in {clip_dir}: " + ", ".join(f"{k}={v}" for k, v in summary.counts.items()))
    if summary.cancelled:
        print(f"Cancelled before processing: {len(summary.cancelled)} clips")
    if summary.failures:
        print(f"Failed ordinals: {', '.join(str(i) for i in summary.failed_ordinals)}")
        for index in summary.failed_ordinals:
            logger.debug("#%d: %s", index, summary.failures[index])
    print('=' * 60)
    return 0 if summary.ok else 1


def main(argv=None):
    """Funzione principale CLI"""
    parser = argparse.ArgumentParser(description='Split an audiobook into one clip per subtitle cue')
    parser.add_argument('audio', nargs='?', help='Path to the audiobook (mp3, m4b, ...)')
    parser.add_argument('subtitle', nargs='?', help='Path to the SRT subtitle file')
    parser.add_argument('--config', type=str, help='Path to the YAML configuration file')
    parser.add_argument('--prefix', type=str, help='Clip file name prefix (default: audio file name)')
    parser.add_argument('--output-dir', type=str, help='Base output directory')
    parser.add_argument('--start-offset', type=int, help='Offset in ms applied to clip boundaries')
    parser.add_argument('--end-offset', type=int, help='Extra offset in ms applied to clip ends')
    parser.add_argument('--chunk-size', type=int, help='Clips cut by a single ffmpeg process')
    parser.add_argument('--workers', type=int, help='Number of parallel ffmpeg processes')
    parser.add_argument('--timeout', dest='tool_timeout', type=float, help='ffmpeg timeout in seconds per chunk')
    parser.add_argument('--dry-run', action='store_true', help='Print intervals without writing any file')
    parser.add_argument('--no-cover', dest='extract_cover', action='store_false', default=None,
                        help='Do not extract the cover art')
    parser.add_argument('--no-notes', dest='write_notes', action='store_false', default=None,
                        help='Do not write the Anki package')
    parser.add_argument('--keep-converted', action='store_true', default=None,
                        help='Keep the mp3 converted from an m4b audiobook')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    # Se non viene passato --config, prova config.yml o config.yaml nella directory corrente
    default_config_path = None
    if not args.config:
        cwd = os.getcwd()
        for candidate in (os.path.join(cwd, 'config.yml'), os.path.join(cwd, 'config.yaml')):
            if os.path.exists(candidate):
                default_config_path = candidate
                break

    try:
        config = Config(config_file=args.config or default_config_path)
        # Aggiorna configurazione con argomenti CLI (hanno precedenza)
        config.update_from_args({
            'audio': args.audio,
            'subtitle': args.subtitle,
            'prefix': args.prefix,
            'output_dir': args.output_dir,
            'start_offset': args.start_offset,
            'end_offset': args.end_offset,
            'chunk_size': args.chunk_size,
            'workers': args.workers,
            'tool_timeout': args.tool_timeout,
            'extract_cover': args.extract_cover,
            'write_notes': args.write_notes,
            'keep_converted': args.keep_converted,
        })
        config.validate()
    except SplitterError as e:
        print(f"Configuration error: {e}")
        return 2

    for key in ('audio', 'subtitle'):
        path = config.get(key)
        if not path:
            parser.error(f"{key} path is required (argument or configuration file)")
        if not os.path.exists(path):
            print(f"File not found: {path}")
            return 2

    try:
        return process_audiobook(config, dry_run=args.dry_run)
    except SplitterError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
