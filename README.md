# pathrouter

A small HTTP path router. There is one trie of patterns for each HTTP method.
For each request, the router picks the highest-priority pattern that matches
the request path and calls the handler attached to that pattern.

## Installation

```
pip install pathrouter
```

## Pattern syntax

Every pattern starts with `/`. A pattern segment takes one of these forms:

| Segment          | Matches                                                    |
|------------------|------------------------------------------------------------|
| `users`          | exactly that literal text                                  |
| `{id}`           | any single segment, captured as `id`                       |
| `{id:[0-9]+}`    | a single segment the regex finds a match in, captured as `id` |
| `a?c*`           | a wildcard segment: `?` is one character, `*` any run      |
| `*`              | any single segment                                         |
| `**`             | one or more segments; two `**` segments may not be adjacent |

A pattern can match several paths, and a path can match several patterns.
When that happens, the more specific pattern wins. The order is literal
segments first, then constrained captures, then plain captures, then
wildcard segments, then `*`, and `**` last. `pathrouter.encode.compute_priority`
encodes this order as a 19-digit number, and a lower number means a higher
priority.

A request path can have at most 19 segments (`MAX_PATH_SEGMENTS`). Empty
segments are skipped. A `..` segment removes the segment before it. A path
with more than 19 segments matches nothing except a `/` pattern.

## Usage

A handler receives a `MatchingContext` and returns a response object. The
response object must have a `write(writer, mc)` method. The writer is any
object with a `headers` mapping, a `write_header(code)` method and a
`write(data)` method.

```python
from pathrouter.router import Request, Router, default_router


class TextResponse:
    def __init__(self, text):
        self.text = text

    def write(self, writer, mc):
        writer.headers["Content-Type"] = ["text/plain; charset=utf-8"]
        writer.write_header(200)
        writer.write(self.text.encode())


class BufferWriter:
    def __init__(self):
        self.headers = {}
        self.code = 0
        self.body = b""

    def write_header(self, code):
        self.code = code

    def write(self, data):
        self.body += data
        return len(data)


def show_user(mc):
    return TextResponse("user " + mc.path_var("user_id"))


def show_file(mc):
    return TextResponse("file " + mc.path)


router = (
    default_router()
    .handle("GET", "/users/{user_id}", show_user)
    .handle("GET", "/static/**", show_file)
)

writer = BufferWriter()
router.serve(Request(method="GET", path="/users/batman"), writer)
# writer.code == 200, writer.body == b"user batman"
```

Matching on HTTP methods is case-insensitive. `serve` writes status 404 in two
cases: when no handler is registered for the method, and when no pattern
matches the path. When a handler raises, `serve` passes the error to the
router's error log function and writes status 500. The same function also
receives errors raised while a response is being written.

`default_router()` matches paths case-sensitively and logs errors through the
`pathrouter.router` logger. You can also build a router with case-insensitive
matching and your own error function:

```python
router = Router(case_insensitive_path_match=True, err_log_func=print)
```

`Router.handle` raises `PatternError` when a pattern is invalid or has already
been registered for that method.

## Lower layers

The parsing and matching layers can be used without the router:

```python
from pathrouter.matcher import Matcher
from pathrouter.matching_context import MatchingContext, parse_url_path
from pathrouter.pattern import parse_pattern

matcher = Matcher(case_insensitive=False)
matcher.add_pattern(parse_pattern("/a/{b}/e", False))

path = "/a/x/e"
mc = MatchingContext(path=path, path_segments=parse_url_path(path))
pattern = matcher.match(path, mc)   # the Pattern for "/a/{b}/e"
mc.path_var("b")                    # "x"
```

- `parse_pattern` raises `PatternError` for an invalid pattern.
- `validate_path_segment` and `determine_match_type_for_segment` check a
  single pattern segment and classify it.
- `regex_segment_match` matches a single segment against a `?`/`*` wildcard.
- `Matcher.add_pattern` raises `DuplicatePatternError`, a subclass of
  `PatternError`, when the same pattern is added twice.

## What it does not do

pathrouter does not contain an HTTP server, and it does not parse requests.
You build each `Request` yourself from an already decoded path. You also
supply the writer and the response objects. The package has no ready-made
response types and does not write any headers on its own.

## Running the tests

```
pip install -e ".[test]"
pytest
```