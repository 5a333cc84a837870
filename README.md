# cacik

Building blocks for behaviour-driven testing with Gherkin. The package
finds `.feature` files and parses them into a plain tree of dataclasses.
It also converts text captured from a step into the Python types a step
function asks for.

## Installing

```
pip install cacik
```

To run the test suite, install the `test` extra and run `pytest`.

## Finding and parsing features

```python
from cacik.parser import search_feature_files_in, parse_gherkin_file

for path in search_feature_files_in(["features"]):
    with open(path, encoding="utf-8") as handle:
        document = parse_gherkin_file(handle)
```

`search_feature_files_in` walks each directory you give it, in sorted
order, and returns every path that ends in `.feature`. If you pass a
single file rather than a directory, that file is returned when it has
the extension.

`parse_gherkin_file` reads a text or binary stream. A binary stream is
decoded as UTF-8. `parse_gherkin_text` takes the source as a string.
Malformed input raises `GherkinParseError`, a `ValueError`. Its `line`
attribute holds the line where the problem was found.

The parser understands:

- `Feature:`, `Background:`, `Rule:`, `Scenario:`, `Example:`,
  `Scenario Outline:` / `Scenario Template:` and `Examples:` / `Scenarios:`
- the step keywords `Given`, `When`, `Then`, `And`, `But` and `*`
- tags (`@smoke`), `#` comments and free-text feature descriptions
- data tables after a step, with `\|`, `\n` and `\\` escapes in cells
- doc strings delimited by `"""` or ```` ``` ````

Keywords are English only. Outline placeholders are not substituted.
Each `Examples` table is stored on its scenario as a `DataTable`.

## The document model

`cacik.model` holds the tree:

- `GherkinDocument` has `feature`, which is `None` for an empty document.
- `Feature` has `children`: `Background`, `Scenario` and `Rule` objects, in source order.
- `Rule` has `children`: `Background` and `Scenario` objects.
- `Background` and `Scenario` have `steps`.
- `Step` has `keyword`, which keeps its trailing space, e.g. `"Given "`. It also has
  `text`, an optional `data_table` and an optional `doc_string`.
- `DataTable` has `rows`, a list of lists of cell strings. `len()` gives the
  number of rows, and iterating yields the rows.

Most nodes also record `name`, `tags` and the source `line`.

## Converting step arguments

```python
from datetime import datetime, timedelta
from cacik.convert import convert_argument, CustomTypeInfo

convert_argument("0xFF", int)              # 255
convert_argument("50%", float)             # 0.5
convert_argument("enabled", bool)          # True
convert_argument("15/01/2024", datetime)   # 2024-01-15 00:00, local time
convert_argument("1h30m", timedelta)

class Color(str):
    pass

colors = {"Color": CustomTypeInfo("Color", "string", {"red": "red", "blue": "blue"})}
convert_argument("RED", Color, colors)     # Color("red")
```

`convert_argument(arg, target, custom_types=None)` chooses a conversion
by the target type:

| target | accepted text |
| --- | --- |
| `str` | returned unchanged |
| `int` | decimal, `0x`/`0o`/`0b` prefixes, leading-zero octal; no size limit |
| `float` | decimal or hex floats; on failure, a trailing `%` divides by 100 |
| `bool` | `true/false`, `yes/no`, `on/off`, `enabled/disabled`, `1/0`, `t/f`, any case |
| `datetime` | a datetime, then a date, then a time, tried in that order |
| any `tzinfo` subclass | `Z`, `UTC`, `+05:30`, `-0800`, IANA names such as `Europe/London` |
| `timedelta` | Go-style durations: `500ms`, `-30m`, `2h45m30s`, `1.5s`, units `ns us µs ms s m h` |
| `SplitResult` / `ParseResult` | `urllib.parse.urlsplit` / `urlparse` |
| `IPv4Address` / `IPv6Address` | any IPv4 or IPv6 address |
| `bytes` | strict base64 |
| `list` | split on commas |
| `re.Pattern` | a regular expression; surrounding `/…/` is stripped |
| subclasses of `str`, `int`, `float` | custom types, see below |

Dates are read day first (`DD/MM/YYYY`, with `/`, `-` or `.`). ISO
`YYYY-MM-DD` and written forms such as `15 Jan 2024` and `Jan 15, 2024`
are also accepted. Times are 24-hour or am/pm, with optional seconds and
fractions. A trailing timezone may be attached to a time or a datetime.
Without one, the value is naive local time. A bare time carries the date
0001-01-01.

For a custom type, the mapping is looked up by the type's `__name__`.
When an entry is found, the argument is matched case-insensitively
against its lower-cased keys, and the mapped value is used. Unknown
values are rejected with the allowed list. Types with no entry accept
any text that converts to their base type.

The helpers `parse_bool`, `parse_timezone`, `extract_timezone`,
`parse_time`, `parse_date`, `parse_datetime` and `parse_duration` are
also public. Every failure raises `ConversionError`, a `ValueError`.

## What this package does not do

It does not register step definitions, match steps against patterns or
run scenarios. It has no hooks, no reporting and no command-line runner.
The parser and the converter are the pieces you build those on.