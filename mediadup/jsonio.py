# mediadup/jsonio.py
from __future__ import annotations
import json, logging, sys
from typing import Any, Dict, Optional

def enable_json_logging(verbose: bool = False):
    """Route logs to stderr so stdout carries exactly one JSON document."""
    for h in logging.root.handlers[:]:
        logging.root.removeHandler(h)
    logging.basicConfig(stream=sys.stderr, level=logging.DEBUG if verbose else logging.ERROR,
                        format="%(asctime)s [%(levelname)s] %(message)s")

def dumps(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, indent=2, sort_keys=False)

def success(command: str, data: Dict[str, Any] | list | None = None,
            meta: Optional[Dict[str, Any]] = None, code: int = 0) -> int:
    payload = {"result": "success", "command": command, "data": data if data is not None else {}}
    if meta:
        payload["meta"] = meta
    print(json.dumps(payload, ensure_ascii=False), file=sys.stdout)
    sys.stdout.flush()
    return code

def error(command: str, message: str, debug: Optional[Dict[str, Any]] = None, code: int = 2) -> int:
    payload = {"result": "error", "command": command, "error": message}
    if debug:
        payload["debug"] = debug
    print(json.dumps(payload, ensure_ascii=False), file=sys.stdout)
    sys.stdout.flush()
    return code
