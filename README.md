# promptline

promptline provides the pieces of a powerline-style shell prompt: rows
of coloured segments joined by separator glyphs, drawn with 256-colour
escape sequences wrapped by a shell-specific template.

## Pieces

- `promptline.powerline` – `Powerline`, `Segment`, `ShellInfo` and
  `Alignment`. A `Powerline` holds rows of segments, colours them with
  `fg_color` / `bg_color`, shrinks rows with `truncate_row` and renders
  everything with `draw()`. `term_width()` reads the terminal width
  (falling back to `$COLUMNS`), and `truncate_text()` cuts text to a
  number of terminal cells with a trailing marker.
- `promptline.themes` – the `Theme` palette and the `Symbols` glyph set.
  `Theme.from_json` lays a JSON object (CamelCase keys such as
  `"CwdFg"`, matched case-insensitively) over a base theme.
- `promptline.options` – `Args`, `parse_args()` for the command-line
  flags (`-cwd-mode`, `-cwd-max-depth`, `-max-width`, `-error`,
  `-newline`, `-eval`, `-condensed` and the rest), `parse_priorities()`,
  `load_json_theme()`, `get_valid_cwd()` (raises `InvalidCwdError` when
  `$PWD` is unset) and `warn()`.
- `promptline.segments` – functions that each take a `Powerline` and
  append zero or more segments:
  - `cwd.segment_cwd` – the current directory, with `~` for home, path
    aliases, a depth limit with an ellipsis and per-directory
    shortening (`fancy`, `plain` or `dironly`).
  - `basic.segment_perms` – a lock when the directory is not writable.
  - `basic.segment_jobs` – the number of background jobs, counted via `ps`.
  - `basic.segment_exit_code` – the previous exit status, numeric or as a
    name from `meaning_from_exit_code` (`NOTFOUND`, `SIGINT`, ...).
  - `basic.segment_root` – the prompt indicator, coloured by the last
    exit status.
  - `basic.segment_dotenv`, `basic.segment_terraform_workspace`,
    `basic.segment_term_title`, `basic.segment_newline`.
  - `git.segment_git_lite` – the current branch, or the short commit when
    HEAD is detached; repositories listed in `-ignore-repos` are skipped.
  - `kube.segment_kube` – the current Kubernetes context and namespace,
    marked `-sudo` when the active gcloud account starts with `sudo-`.

## Example

```python
from promptline.options import parse_args, parse_priorities
from promptline.powerline import Powerline, ShellInfo, truncate_text
from promptline.themes import Symbols, Theme
from promptline.segments.cwd import segment_cwd
from promptline.segments.basic import meaning_from_exit_code, segment_exit_code, segment_root

args = parse_args(["-error", "127"])
priorities = parse_priorities(args.priority)
shell = ShellInfo(root_indicator="$", color_template="\x1b%s")
theme = Theme(path_fg=250, path_bg=237, cwd_fg=254, cmd_failed_fg=15, cmd_failed_bg=161)
symbols = Symbols(separator=">", separator_thin="|")

p = Powerline(args, "/tmp", priorities, theme=theme, shell_info=shell, symbols=symbols)
for add in (segment_cwd, segment_exit_code, segment_root):
    add(p)
print(p.draw())

meaning_from_exit_code(130)                 # "SIGINT"
truncate_text("a-rather-long-name", 8, "…")  # "a-rathe…"
```

## Fitting the terminal

With `-max-width` set to a percentage of the terminal width,
`truncate_row` first shortens the lowest-priority segments wider than
`-truncate-segment-width`, then drops the lowest-priority segments until
the row fits. Priorities come from a comma-separated list, earliest
highest.

## What it does not do

- There is no `promptline` command: nothing maps module names from
  `-modules` to the segment functions or assembles a prompt from the
  parsed arguments; you call the segment functions yourself.
- No named themes, shell definitions or symbol sets are included. `Theme`,
  `ShellInfo` and `Symbols` start empty and must be filled in by you.
- A right-hand prompt is drawn only when you attach one through the
  `right_powerline` attribute.