import argparse, json, logging, os, sys
from pathlib import Path

from config import ConfigError, load_settings
from publisher.front_matter import PostRecord
from publisher.images import UPLOAD_PREFIX, compress_image, load_image_base64, save_and_compress_image
from repository import PostNotFoundError, PostRepository
from slugs import create_safe_filename, split_keywords

def setup_logging():
    level = logging.DEBUG if os.getenv("DEBUG_LOGGING") is not None else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)-21s %(levelname)-8s %(name)-12s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

def _post_from_args(args, title: str) -> PostRecord:
    body = Path(args.body_file).read_text(encoding="utf-8") if args.body_file else ""
    tags = [t.strip() for t in (args.tags or "").split(",") if t.strip()]
    return PostRecord(
        title=title,
        body=body,
        description=args.description,
        author=args.author,
        cover_image=args.cover,
        hidden_in_list=args.hidden_in_list,
        tags=tags,
        weight=args.weight,
        slug=args.slug,
        keywords=split_keywords(args.keywords or ""),
    )

def cmd_list(repo: PostRepository, args) -> int:
    result = repo.list_posts(args.page, args.page_size, args.search)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return 0
    print(f">> {result.total_count} post(s), page {max(args.page, 1)}", flush=True)
    for p in result.posts:
        kw = f"  [{', '.join(p.keywords)}]" if p.keywords else ""
        print(f"   {p.date or '----------'}  {p.title}{kw}")
    return 0

def cmd_titles(repo: PostRepository, args) -> int:
    for t in repo.list_titles():
        print(t)
    return 0

def cmd_show(repo: PostRepository, args) -> int:
    sys.stdout.write(repo.load_post(args.title))
    return 0

def cmd_new(repo: PostRepository, args) -> int:
    dup, where = repo.check_title_duplicate(args.title)
    if dup and not args.force:
        print(f">> A post with this title already exists: {where} (use --force to overwrite)", file=sys.stderr)
        return 1
    path = repo.save_post(_post_from_args(args, args.title))
    print(">> Saved:", path, flush=True)
    return 0

def cmd_update(repo: PostRepository, args) -> int:
    path = repo.update_post(args.old_title, _post_from_args(args, args.new_title))
    print(">> Updated:", path, flush=True)
    return 0

def cmd_delete(repo: PostRepository, args) -> int:
    path = repo.delete_post(args.title)
    print(">> Deleted:", path, flush=True)
    return 0

def cmd_check_title(repo: PostRepository, args) -> int:
    dup, where = repo.check_title_duplicate(args.title)
    print(json.dumps({"duplicate": dup, "path": str(where) if where else ""}, ensure_ascii=False))
    return 0

def cmd_compress(repo: PostRepository, args) -> int:
    print(">> Compressed:", compress_image(args.src, args.dst), flush=True)
    return 0

def cmd_upload(repo: PostRepository, args) -> int:
    if repo.image_dir is None:
        raise ValueError("image_dir is not configured")
    raw = sys.stdin.read() if args.src == "-" else Path(args.src).read_text(encoding="ascii")
    name = create_safe_filename(Path(args.name).stem) + ".jpg"
    dst = save_and_compress_image("".join(raw.split()), args.name, repo.image_dir / name)
    print(">> Uploaded:", dst, file=sys.stderr, flush=True)
    print(UPLOAD_PREFIX + dst.name)
    return 0

def cmd_preview(repo: PostRepository, args) -> int:
    print(load_image_base64(args.image, repo.site_root))
    return 0

def _add_post_options(p: argparse.ArgumentParser):
    p.add_argument("--body-file", help="Markdown file holding the post body")
    p.add_argument("--description", default="")
    p.add_argument("--author", default="")
    p.add_argument("--cover", default="", help="Cover image path relative to the site root, e.g. /images/uploads/a.jpg")
    p.add_argument("--hidden-in-list", action="store_true", help="Hide the cover image in list views")
    p.add_argument("--tags", default="", help="Comma separated tags")
    p.add_argument("--weight", type=int, default=1)
    p.add_argument("--slug", default="", help="Custom slug used instead of the title for the filename")
    p.add_argument("--keywords", default="", help="Comma separated keywords")

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage date-sharded markdown posts of a Hugo site")
    parser.add_argument("--config", help="Path to config.yaml")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("list", help="List posts, newest first")
    p.add_argument("--page", type=int, default=1)
    p.add_argument("--page-size", type=int, default=0, help="Defaults to page_size from the config")
    p.add_argument("--search", default="")
    p.add_argument("--json", action="store_true")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("titles", help="List post filenames without parsing them")
    p.set_defaults(func=cmd_titles)

    p = sub.add_parser("show", help="Print a post's raw markdown")
    p.add_argument("title")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("new", help="Create a post in today's directory")
    p.add_argument("title")
    p.add_argument("--force", action="store_true", help="Overwrite a post with the same filename")
    _add_post_options(p)
    p.set_defaults(func=cmd_new)

    p = sub.add_parser("update", help="Replace a post, possibly under a new title")
    p.add_argument("old_title")
    p.add_argument("new_title")
    _add_post_options(p)
    p.set_defaults(func=cmd_update)

    p = sub.add_parser("delete", help="Delete a post and the uploaded images it references")
    p.add_argument("title")
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser("check-title", help="Report whether a title's filename is already taken")
    p.add_argument("title")
    p.set_defaults(func=cmd_check_title)

    p = sub.add_parser("compress", help="Resize to 1920px and re-encode as JPEG")
    p.add_argument("src")
    p.add_argument("dst")
    p.set_defaults(func=cmd_compress)

    p = sub.add_parser("upload", help="Store a base64 encoded image as a compressed JPEG in image_dir")
    p.add_argument("src", help="File holding the base64 payload, or - for stdin")
    p.add_argument("--name", required=True, help="Original filename, used to name the upload")
    p.set_defaults(func=cmd_upload)

    p = sub.add_parser("preview", help="Print an image as base64, e.g. a cover path like /images/uploads/a.jpg")
    p.add_argument("image")
    p.set_defaults(func=cmd_preview)
    return parser

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()
    try:
        settings = load_settings(args.config)
        if getattr(args, "page_size", None) is not None and args.page_size <= 0:
            args.page_size = settings.page_size
        repo = PostRepository.from_settings(settings)
        rc = args.func(repo, args)
        if repo.notifier is not None:
            repo.notifier.drain(settings.indexnow.delay_seconds + settings.indexnow.timeout)
        return rc
    except (ConfigError, PostNotFoundError, OSError, ValueError) as e:
        print(f">> Error: {e}", file=sys.stderr)
        return 1

if __name__ == "__main__":
    sys.exit(main())
