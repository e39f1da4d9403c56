"""JSON file sink for exporting data to files."""

import json
import threading
from pathlib import Path
from typing import Any

from recurring_donations.exceptions import SinkError
from recurring_donations.sinks.serialization import to_dict


class JsonFileSink:
    """Output batches to JSON files and single records to JSON Lines files."""

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON files.
        pretty : bool
            Pretty-print batch JSON output.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self._counts: dict[str, int] = {}
        self._lock = threading.Lock()

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Write a batch of records to ``<entity_type>.json``, replacing it.

        Raises
        ------
        SinkError
            If the file cannot be written.
        """
        file_path = self.output_dir / f"{entity_type}.json"

        data = [to_dict(record) for record in records]

        try:
            with open(file_path, "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(data, f, indent=2, ensure_ascii=False, default=str)
                else:
                    json.dump(data, f, ensure_ascii=False, default=str)
        except OSError as exc:
            raise SinkError(f"Could not write {file_path}: {exc}") from exc

        self._counts[entity_type] = len(records)

    def send(self, entity_type: str, record: Any) -> None:
        """Append one record to ``<entity_type>.jsonl``.

        Raises
        ------
        SinkError
            If the file cannot be written.
        """
        file_path = self.output_dir / f"{entity_type}.jsonl"
        line = json.dumps(to_dict(record), ensure_ascii=False, default=str)

        with self._lock:
            try:
                with open(file_path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
            except OSError as exc:
                raise SinkError(f"Could not append to {file_path}: {exc}") from exc
            self._counts[entity_type] = self._counts.get(entity_type, 0) + 1

    def close(self) -> None:
        """Print summary."""
        print(f"JSON files written to: {self.output_dir}")
        for entity_type, count in self._counts.items():
            print(f"  {entity_type}: {count} records")
