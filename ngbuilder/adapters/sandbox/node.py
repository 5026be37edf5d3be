"""
Node.js sandbox — runs a block with ``vm.runInNewContext`` in a child process.

The request (source, declaration syntax, timeout) travels as JSON on
stdin; the driver answers with a JSON report on stdout. The script
itself is bounded by the vm timeout and the child process by that
timeout plus a grace period.
"""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
import time

from ngbuilder.adapters.sandbox.base import CHAINABLE_METHODS, ScriptSandbox
from ngbuilder.core.models.options import DeclarationSyntax
from ngbuilder.core.models.validation import LeakedGlobal, ValidationReport

logger = logging.getLogger(__name__)

_GRACE_SECONDS = 5.0

_DRIVER = r"""
'use strict';
const vm = require('vm');

function check(req) {
  const noop = function () {};
  const mod = {};
  req.chainable.forEach(function (m) { mod[m] = function () { return mod; }; });
  mod.name = '';
  mod.requires = [];

  const api = {};
  api[req.method] = function () { return mod; };

  const quiet = {};
  ['assert', 'count', 'debug', 'dir', 'error', 'group', 'groupCollapsed',
   'groupEnd', 'info', 'log', 'table', 'time', 'timeEnd', 'trace', 'warn']
    .forEach(function (m) { quiet[m] = noop; });

  const context = { console: quiet, window: {} };
  context[req.namespace] = api;
  const baseline = new Set(Object.keys(context));

  const report = { status: 'valid', leaks: [], error: null };
  try {
    vm.runInNewContext(req.source, context, {
      timeout: req.timeoutMs,
      filename: req.filename || 'source.js',
    });
  } catch (e) {
    if (e && e.code === 'ERR_SCRIPT_EXECUTION_TIMEOUT') {
      report.status = 'timed_out';
      report.error = String(e.message);
      return report;
    }
    const missing = e && e.name === 'ReferenceError'
      ? /^(\S+) is not defined/.exec(String(e.message)) : null;
    if (missing) {
      report.leaks.push({ name: missing[1], kind: 'unknown' });
    } else {
      report.status = 'error';
      report.error = e && e.message !== undefined ? String(e.name) + ': ' + e.message : String(e);
    }
  }

  Object.keys(context).forEach(function (k) {
    if (!baseline.has(k)) {
      report.leaks.push({ name: k, kind: typeof context[k] === 'function' ? 'function' : 'var' });
    }
  });
  if (report.leaks.length) report.status = 'leaked';
  return report;
}

let input = '';
process.stdin.setEncoding('utf8');
process.stdin.on('data', function (chunk) { input += chunk; });
process.stdin.on('end', function () {
  process.stdout.write(JSON.stringify(check(JSON.parse(input))));
});
"""


class NodeSandbox(ScriptSandbox):
    """Script sandbox backed by the Node.js ``vm`` module."""

    def __init__(self, node_binary: str = "node", grace: float = _GRACE_SECONDS):
        self._node = node_binary
        self._grace = grace

    @property
    def name(self) -> str:
        return "node"

    def is_available(self) -> bool:
        return shutil.which(self._node) is not None

    def run(
        self,
        source: str,
        syntax: DeclarationSyntax,
        timeout: float,
        filename: str | None = None,
    ) -> ValidationReport:
        request = json.dumps({
            "source": source,
            "namespace": syntax.namespace,
            "method": syntax.method,
            "chainable": list(CHAINABLE_METHODS),
            "timeoutMs": max(int(timeout * 1000), 1),
            "filename": filename,
        })
        limit = timeout + self._grace
        start = time.monotonic()
        try:
            result = subprocess.run(
                [self._node, "-e", _DRIVER],
                input=request,
                capture_output=True,
                text=True,
                timeout=limit,
            )
        except subprocess.TimeoutExpired:
            return ValidationReport.timed_out(
                f"Sandbox process did not finish within {limit:.1f}s",
                duration_ms=int((time.monotonic() - start) * 1000),
            )
        except OSError as e:
            return ValidationReport.failure(f"Could not start {self._node}: {e}")

        elapsed_ms = int((time.monotonic() - start) * 1000)
        if result.returncode != 0:
            return ValidationReport.failure(
                result.stderr.strip() or f"Exit code {result.returncode}",
                duration_ms=elapsed_ms,
            )
        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError:
            return ValidationReport.failure(
                f"Unreadable sandbox output: {result.stdout.strip()[:200]!r}",
                duration_ms=elapsed_ms,
            )

        logger.debug("Sandbox %s → %s in %dms", filename or "<source>", data.get("status"), elapsed_ms)
        return ValidationReport(
            status=data.get("status", "error"),
            leaks=[LeakedGlobal(**leak) for leak in data.get("leaks", [])],
            error=data.get("error"),
            duration_ms=elapsed_ms,
        )
