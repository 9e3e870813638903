# yippee

This package provides building blocks for an AUR helper. It covers
pacman-style version constraints, a dependency graph that sorts into
install layers, a resolver that builds that graph from targets, and a
shell-completion cache. It has no runtime dependencies.

## Installation

```
pip install .
```

To install the test tools as well:

```
pip install ".[test]"
```

## Modules

- `yippee.db` holds the package records `Package`, `Depend`, `Upgrade`
  and `SyncUpgrade`, and the `PkgReason` and `DepMod` enums. It also
  defines `Executor`, a protocol that describes access to the local and
  sync package databases. Two functions complete the module: `vercmp`
  compares versions the way pacman does, handling epoch, version and
  release, and returns a negative value when the first version is
  older. `arch_is_supported` checks an architecture against a list.
- `yippee.topo` provides a generic dependency `Graph`.
  - `depend_on(child, parent)` records that `parent` needs `child`. A
    self-referential edge raises `SelfReferentialError`, and an edge
    that would close a cycle raises `CircularDependencyError`. Both
    errors derive from `TopoError`.
  - `topo_sorted_layer_map` returns a list of layers. Each layer maps
    node names to the values of their `NodeInfo`, and the list runs from
    the top-level dependents down to their dependencies.
  - `prune`, `dependencies`, `dependents` and the provides lookups work
    on the same graph.
  - `str(graph)` renders the graph in Graphviz dot format.
- `yippee.dep` contains the dependency-string helpers `split_dep`,
  `ver_satisfies`, `pkg_satisfies`, `provide_satisfies` and
  `satisfies_aur`. It also holds the `AurPkg` record and `Target`.
  `to_target` builds a `Target` from a string such as
  `extra/libzip>=1.9`.
- `yippee.install_info` contains the `Reason`, `Source` and
  `InstallInfo` records that are attached to graph nodes.
  - It has a `.SRCINFO` model made of `Srcinfo`, `SrcinfoPackage` and
    `ArchString`.
  - `make_aur_pkgs_from_srcinfo` turns that model into `AurPkg` values.
    It keeps only the entries whose architecture the executor supports.
  - `aur_dep_mod_to_alpm_dep` maps `=`, `>=` and the other modifiers to
    `DepMod`.
  - `new_graph` returns an empty graph.
- `yippee.grapher` provides `Grapher`, which resolves targets and their
  dependencies into a `Graph`.
  - It looks in sync repositories and groups first, through an
    `Executor`. After that it looks in the AUR, through any object that
    follows the `AurClient` protocol: a `get(query)` method that takes an
    `AurQuery` and returns `AurPkg` values.
  - When more than one provider matches, it asks the user through the
    `prompt` callable, which defaults to `input`. With `no_confirm` set
    it takes the first provider without asking.
  - Its entry points are `graph_from_targets`, `graph_from_aur` and
    `graph_from_srcinfos`.
- `yippee.completion` builds and refreshes a completion file.
  - The file lists AUR packages, one per line followed by a tab and
    `AUR`. It then lists repository packages, taken from
    `db_executor.sync_packages()`, each followed by a tab and its
    repository.
  - `update` rewrites the file when it is missing, older than `interval`
    days, or when `force` is set. An `interval` of `-1` disables the
    age check.
  - `show` runs `update` and then writes the file to standard output.
  - The HTTP client is any object with a `get(url)` method that returns
    a response with `status_code` and `text`. Pass `None` to use the
    standard library. A status other than 200 raises `CompletionError`.

## Example

```python
from yippee.topo import Graph

graph = Graph()
graph.depend_on("libzip", "gourou")   # gourou depends on libzip
layers = graph.topo_sorted_layer_map(None)
# layers[0] holds "gourou" and layers[1] holds "libzip".
```

```python
from yippee.dep import split_dep, to_target

split_dep("ceph-libs=17.2.6-2")      # ("ceph-libs", "=", "17.2.6-2")
str(to_target("extra/libzip>=1.9"))  # "extra/libzip>=1.9"
```

## What it does not do

- There is no command-line program. Nothing installs, removes, builds
  or downloads packages.
- `Executor` is only a protocol. No implementation reads pacman's
  databases, so you supply your own.
- `AurClient` is likewise only a protocol, and the package has no
  client for the AUR RPC interface. The only network access is the
  `packages.gz` download in `yippee.completion`.
- Nothing parses `.SRCINFO` files from disk. Build `Srcinfo` values
  yourself.