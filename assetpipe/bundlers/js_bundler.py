"""
JavaScript bundler
==================

Packs CommonJS module records into one script. Each record becomes a
function in a module map keyed by id; ``deps`` maps the specifiers a module
passes to ``require`` onto module ids. Modules flagged ``entry`` run when the
script loads, in feed order.
"""

import json
from typing import Any, Sequence

from ..models import BundleOptions, JSModule
from .base import unique_records


PRELUDE = """(function (modules, entries) {
  var cache = {};
  function load(id) {
    if (cache[id]) return cache[id].exports;
    var definition = modules[id];
    if (!definition) throw new Error('Cannot find module "' + id + '"');
    var module = cache[id] = { exports: {} };
    definition[0].call(module.exports, function (name) {
      var target = definition[1][name];
      return load(target !== undefined ? target : name);
    }, module, module.exports);
    return module.exports;
  }
  for (var i = 0; i < entries.length; i++) load(entries[i]);
})"""

NODE_ENV_REFERENCE = "process.env.NODE_ENV"


class JSBundler:
    """Concatenates JS module records behind a small ``require`` loader."""

    def bundle(self, feeds: Sequence[Any], options: BundleOptions) -> str:
        modules = unique_records(feeds, JSModule)
        env_literal = json.dumps(options.env)

        definitions = []
        for module in modules:
            source = module.source.replace(NODE_ENV_REFERENCE, env_literal)
            definitions.append(
                f"{json.dumps(module.id)}: [function (require, module, exports) {{\n"
                f"{source}\n"
                f"}}, {json.dumps(module.deps, sort_keys=True)}]"
            )

        entries = [module.id for module in modules if module.entry]

        return (
            f"{PRELUDE}({{\n"
            + ",\n".join(definitions)
            + f"\n}}, {json.dumps(entries)});\n"
        )
