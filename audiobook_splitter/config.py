"""
Modulo per la gestione della configurazione dello splitter di audiolibri
"""
import copy
import os
import yaml
from typing import Dict, Any, Optional

from .services.errors import ConfigError


class Config:
    """Classe per gestire la configurazione dell'applicazione"""

    DEFAULT_CONFIG = {
        'audio': None,
        'subtitle': None,
        'prefix': None,
        'output_dir': './gen',
        'start_offset': 0,          # ms, entrambi i limiti
        'end_offset': 0,            # ms, solo la fine
        'chunk_size': 25,
        'workers': None,            # None: default di ThreadPoolExecutor
        'extension': 'mp3',
        'ffmpeg': 'ffmpeg',
        'tool_timeout': 600,        # secondi per chunk, None disattiva
        'convert_m4b': True,
        'keep_converted': False,
        'extract_cover': True,
        'write_notes': True,
        'ffmpeg_options': {
            'loglevel': 'error',
        },
    }

    NESTED_KEYS = ('ffmpeg_options',)

    def __init__(self, config_file: Optional[str] = None):
        """
        Inizializza la configurazione

        Args:
            config_file: Path al file di configurazione YAML (opzionale)
        """
        # Deep copy per evitare modifiche ai default
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)

        if config_file and os.path.exists(config_file):
            self.load_from_file(config_file)

    def load_from_file(self, config_file: str) -> None:
        """
        Carica la configurazione da file YAML

        Args:
            config_file: Path al file di configurazione
        """
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Error loading configuration file: {e}") from e
        if not file_config:
            return
        if not isinstance(file_config, dict):
            raise ConfigError("Configuration file must contain a mapping")
        for key, value in file_config.items():
            if key in self.NESTED_KEYS and isinstance(value, dict):
                if key not in self.config:
                    self.config[key] = {}
                self._deep_merge(self.config[key], value)
            else:
                self.config[key] = value

    def _deep_merge(self, base: dict, update: dict) -> None:
        """
        Merge profondo di dizionari annidati

        Args:
            base: Dizionario da aggiornare
            update: Dizionario con gli aggiornamenti
        """
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def update_from_args(self, args: Dict[str, Any]) -> None:
        """
        Aggiorna la configurazione con argomenti CLI
        Gli argomenti CLI hanno precedenza sul file di configurazione

        Args:
            args: Dizionario con gli argomenti CLI
        """
        for key, value in args.items():
            if value is not None:
                self.config[key] = value

    def validate(self) -> None:
        """Controlla i tipi dei valori; solleva ConfigError al primo valore errato"""
        for key in ('start_offset', 'end_offset'):
            value = self.config.get(key)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"'{key}' must be an integer number of milliseconds")
        chunk_size = self.config.get('chunk_size')
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size < 1:
            raise ConfigError("'chunk_size' must be an integer >= 1")
        workers = self.config.get('workers')
        if workers is not None and (isinstance(workers, bool) or not isinstance(workers, int) or workers < 1):
            raise ConfigError("'workers' must be an integer >= 1")
        timeout = self.config.get('tool_timeout')
        if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0):
            raise ConfigError("'tool_timeout' must be a positive number of seconds")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Ottiene un valore di configurazione

        Args:
            key: Chiave della configurazione
            default: Valore di default se la chiave non esiste

        Returns:
            Il valore della configurazione
        """
        return self.config.get(key, default)
