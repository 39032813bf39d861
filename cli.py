#!/usr/bin/env python3
"""
OpenHunt CLI - pattern extraction and JavaScript collection for bug bounty work
Commands: patterns, gf, endpoints, scan-dir, download, httpx
"""

import json
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from colorama import init, Fore, Style
init(autoreset=True)

from openhunt import __version__
from openhunt.core.config import get_default_config
from openhunt.core.logger import logger, set_verbose, set_silent
from openhunt.models import DownloadProgress
from openhunt.output import exporter
from openhunt.output.html_report import HTMLReportGenerator
from openhunt.pipelines.downloader import (
    BatchController, JsDownloadRunner, parse_extensions, filter_urls_by_extension
)
from openhunt.pipelines.downloader.url_filter import load_url_file
from openhunt.pipelines.endpoints import EndpointRunner
from openhunt.pipelines.gf import GfRunner
from openhunt.services.httpx_parser import parse_httpx_output, summarize_httpx
from openhunt.services.workspace import read_multiple_files, read_text_file


CATEGORY_COLORS = {
    'vulnerability': Fore.RED,
    'secrets': Fore.YELLOW,
    'debug': Fore.MAGENTA,
    'interesting': Fore.CYAN,
    'endpoints': Fore.BLUE,
    'urls': Fore.GREEN,
    'domains': Fore.MAGENTA,
    'emails': Fore.YELLOW,
    'params': Fore.CYAN,
}


def print_banner():
    banner = Fore.CYAN + r"""
   ___                   _   _             _
  / _ \ _ __   ___ _ __ | | | |_   _ _ __ | |_
 | | | | '_ \ / _ \ '_ \| |_| | | | | '_ \| __|
 | |_| | |_) |  __/ | | |  _  | |_| | | | | |_
  \___/| .__/ \___|_| |_|_| |_|\__,_|_| |_|\__|
       |_|
""" + Fore.GREEN + f"  Pattern extraction & JS collection v{__version__}\n" + \
        Fore.WHITE + "  For authorized security testing only\n" + Style.RESET_ALL

    print(banner, flush=True)


def show_help():
    print(f"""
{Fore.CYAN}Usage:{Style.RESET_ALL}
    python cli.py <command> [args] [options]

{Fore.CYAN}Commands:{Style.RESET_ALL}
    {Fore.GREEN}patterns{Style.RESET_ALL}              List available gf rules by category
    {Fore.GREEN}gf{Style.RESET_ALL} <file...>          Run gf rules over one or more files
    {Fore.GREEN}endpoints{Style.RESET_ALL} <file...>   Extract endpoints, URLs, secrets, domains, emails, params
    {Fore.GREEN}scan-dir{Style.RESET_ALL} <dir>        Extract from every source file under a directory
    {Fore.GREEN}fetch{Style.RESET_ALL} <url>           Fetch one URL and extract from its body
    {Fore.GREEN}download{Style.RESET_ALL} <urls.txt>   Download JS files from a URL list
    {Fore.GREEN}httpx{Style.RESET_ALL} <file>          Summarize httpx JSON/JSONL output

{Fore.CYAN}Options:{Style.RESET_ALL}
    -o, --output <dir>        Output directory (default: hunt_output)
    -p, --patterns <a,b>      gf rule names to run (default: all)
    -c, --categories <a,b>    Categories to run or extract
    -n, --concurrency <n>     Parallel downloads, 1-50 (default: 10)
    -e, --extensions <list>   Extension allow-list for download (default: .js, "" for all)
    --export <file>           Write results (txt for gf, json for endpoints)
    --html                    Write an HTML report into the output directory
    -v, --verbose             Verbose output
    -s, --silent              Silent mode (minimal output)

{Fore.CYAN}Examples:{Style.RESET_ALL}
    python cli.py gf bundle.js -c secrets,debug
    python cli.py endpoints main.js vendor.js --export endpoints.json
    python cli.py download js_urls.txt -o js_files -n 20 -e .js,.mjs
""")


def parse_args(args):
    config = get_default_config()
    options = {
        'output': config.output_dir,
        'patterns': [],
        'categories': [],
        'concurrency': config.downloader.concurrency,
        'extensions': config.downloader.extensions,
        'export': None,
        'html': False,
        'verbose': False,
        'silent': False,
    }

    positional = []
    i = 0
    while i < len(args):
        arg = args[i]
        if arg in ['-o', '--output', '-p', '--patterns', '-c', '--categories',
                   '-n', '--concurrency', '-e', '--extensions', '--export']:
            if i + 1 < len(args):
                value = args[i + 1]
                if arg in ['-o', '--output']:
                    options['output'] = value
                elif arg in ['-p', '--patterns']:
                    options['patterns'] = [p.strip() for p in value.split(',') if p.strip()]
                elif arg in ['-c', '--categories']:
                    options['categories'] = [c.strip() for c in value.split(',') if c.strip()]
                elif arg in ['-n', '--concurrency']:
                    try:
                        options['concurrency'] = config.downloader.clamp_concurrency(int(value))
                    except ValueError:
                        pass
                elif arg in ['-e', '--extensions']:
                    options['extensions'] = value
                elif arg == '--export':
                    options['export'] = value
                i += 2
                continue
        elif arg == '--html':
            options['html'] = True
        elif arg in ['-v', '--verbose']:
            options['verbose'] = True
        elif arg in ['-s', '--silent']:
            options['silent'] = True
        elif arg in ['-h', '--help']:
            return 'help', [], options
        elif not arg.startswith('-'):
            positional.append(arg)
        i += 1

    command = positional[0] if positional else None
    targets = positional[1:]

    return command, targets, options


def apply_verbosity(options):
    if options['verbose']:
        set_verbose(True)
    elif options['silent']:
        set_silent(True)


def show_patterns():
    print_banner()
    runner = GfRunner(silent_mode=True)
    grouped = runner.rules_by_category()

    if not any(grouped.values()):
        print(f"{Fore.YELLOW}No rules loaded{Style.RESET_ALL}")
        return

    for category, rules in grouped.items():
        color = CATEGORY_COLORS.get(category.value, Fore.WHITE)
        print(f"\n{color}{category.value.upper()}{Style.RESET_ALL} ({len(rules)})")
        for rule in rules:
            print(f"  {Fore.GREEN}{rule.name:<20}{Style.RESET_ALL} {rule.description}")


def run_gf(files, options):
    """Category-tagged rule scan over files"""
    print_banner()
    apply_verbosity(options)

    try:
        runner = GfRunner(silent_mode=options['silent'])
        text = read_files(files)
        results = runner.run(text, rule_names=options['patterns'], categories=options['categories'])

        if not results:
            print(f"\n{Fore.YELLOW}[!] No matches{Style.RESET_ALL}")

        for result in results:
            color = CATEGORY_COLORS.get(result.category, Fore.WHITE)
            print(f"\n{color}[{result.category}]{Style.RESET_ALL} {Fore.WHITE}{result.rule_name}{Style.RESET_ALL} "
                  f"({result.total_matches})")
            for pattern_match in result.per_pattern:
                print(f"  {Fore.CYAN}{pattern_match.pattern}{Style.RESET_ALL}")
                for value in pattern_match.matches:
                    print(f"    {value}")

        if options['export']:
            exporter.write_export(options['export'], exporter.matches_as_text(results))
        if options['html']:
            path = HTMLReportGenerator().generate(source_label(files), options['output'], match_results=results)
            logger.info(f"HTML report: {path}")

        return results

    except Exception as e:
        logger.error(f"Pattern scan failed: {e}")
        sys.exit(1)


def print_extracted(items):
    grouped = EndpointRunner.grouped(items)
    if not grouped:
        print(f"\n{Fore.YELLOW}[!] Nothing extracted{Style.RESET_ALL}")
    for category, found in grouped.items():
        color = CATEGORY_COLORS.get(category, Fore.WHITE)
        print(f"\n{color}{category.upper()}{Style.RESET_ALL} ({len(found)})")
        for item in found:
            print(f"  {item.value}")


def finish_extraction(items, label, options):
    print_extracted(items)
    if options['export']:
        exporter.write_export(options['export'], exporter.items_as_json(items))
    if options['html']:
        path = HTMLReportGenerator().generate(label, options['output'], extracted=items)
        logger.info(f"HTML report: {path}")
    return items


def run_endpoints(files, options):
    """Free-form extraction over files"""
    print_banner()
    apply_verbosity(options)

    try:
        runner = EndpointRunner(silent_mode=options['silent'])
        items = runner.run(read_files(files), options['categories'] or None)
        return finish_extraction(items, source_label(files), options)
    except Exception as e:
        logger.error(f"Extraction failed: {e}")
        sys.exit(1)


def run_scan_dir(root, options):
    """Free-form extraction over a workspace directory"""
    print_banner()
    apply_verbosity(options)

    try:
        runner = EndpointRunner(silent_mode=options['silent'])
        items = runner.run_directory(root, options['categories'] or None)
        return finish_extraction(items, os.path.basename(os.path.abspath(root)), options)
    except Exception as e:
        logger.error(f"Directory scan failed: {e}")
        sys.exit(1)


def run_fetch(url, options):
    """Fetch a single URL and extract from the response body"""
    print_banner()
    apply_verbosity(options)

    runner = EndpointRunner(silent_mode=options['silent'])
    items, error = runner.run_url(url, options['categories'] or None)
    if error:
        print(f"{Fore.RED}[-] {url}: {error}{Style.RESET_ALL}")
        sys.exit(1)
    return finish_extraction(items, url, options)


def print_progress(progress: DownloadProgress):
    result = progress.result
    counter = f"[{progress.completed}/{progress.total}]"
    if result.success:
        print(f"  {Fore.GREEN}{counter}{Style.RESET_ALL} {result.filename} ({result.size} chars)", flush=True)
    else:
        print(f"  {Fore.RED}{counter}{Style.RESET_ALL} {result.url} - {result.error}", flush=True)


def run_download(url_file, options):
    """Batch download of JavaScript files"""
    print_banner()
    apply_verbosity(options)

    try:
        urls = load_url_file(url_file)
    except OSError as e:
        logger.error(f"Cannot read URL list: {e}")
        sys.exit(1)

    extensions = parse_extensions(options['extensions'])
    filtered = filter_urls_by_extension(urls, extensions)

    if not filtered:
        print(f"{Fore.RED}[-] No URLs to download{Style.RESET_ALL}")
        sys.exit(1)

    if not options['silent']:
        print(f"\n{Fore.CYAN}[DOWNLOAD]{Style.RESET_ALL}")
        print(f"  URLs: {len(filtered)} ({len(urls) - len(filtered)} filtered out)")
        print(f"  Output: {options['output']}")
        print(f"  Concurrency: {options['concurrency']}\n")

    runner = JsDownloadRunner(silent_mode=options['silent'])
    controller = BatchController(runner.config.downloader.poll_interval)

    try:
        summary = runner.run(
            filtered,
            options['output'],
            concurrency=options['concurrency'],
            controller=controller,
            on_progress=None if options['silent'] else print_progress
        )
    except KeyboardInterrupt:
        controller.stop()
        print(f"\n{Fore.YELLOW}[!] Download interrupted{Style.RESET_ALL}")
        sys.exit(1)

    print(f"\n{Fore.GREEN}[+] Download complete: {summary.successful}/{summary.total} successful{Style.RESET_ALL}")
    if summary.failed:
        print(f"  {Fore.RED}Failed: {summary.failed}{Style.RESET_ALL}")

    if options["export"]:
        report = exporter.summary_report(summary, options['output'])
        exporter.write_export(options['export'], json.dumps(report, indent=2))

    return summary


def run_httpx(filepath, options):
    """Summarize httpx output"""
    print_banner()
    apply_verbosity(options)

    try:
        records = parse_httpx_output(read_text_file(filepath))
    except OSError as e:
        logger.error(f"Cannot read {filepath}: {e}")
        sys.exit(1)

    summary = summarize_httpx(records)
    print(f"\n{Fore.CYAN}httpx records:{Style.RESET_ALL} {summary['total']} ({summary['unique_hosts']} hosts)")

    if summary['status_codes']:
        print(f"\n  {Fore.CYAN}Status codes:{Style.RESET_ALL}")
        for code, count in summary['status_codes'].items():
            color = Fore.GREEN if code.startswith('2') else Fore.YELLOW if code.startswith('3') else Fore.RED
            print(f"    {color}{code}{Style.RESET_ALL}: {count}")

    if summary['technologies']:
        print(f"\n  {Fore.CYAN}Technologies:{Style.RESET_ALL}")
        for tech, count in list(summary['technologies'].items())[:15]:
            print(f"    {tech}: {count}")

    return summary


def read_files(files):
    if len(files) == 1:
        return read_text_file(files[0])
    return read_multiple_files(files)


def source_label(files):
    if len(files) == 1:
        return os.path.basename(files[0])
    return f"{len(files)} files"


def require_targets(targets, command, what='file'):
    if not targets:
        print(f"{Fore.RED}[-] Error: No {what} specified{Style.RESET_ALL}")
        print(f"Usage: python cli.py {command} <{what}>")
        sys.exit(1)


def main():
    args = sys.argv[1:]

    if not args:
        print_banner()
        show_help()
        return

    command, targets, options = parse_args(args)

    if command == 'help':
        print_banner()
        show_help()
    elif command == 'patterns':
        show_patterns()
    elif command == 'gf':
        require_targets(targets, command)
        run_gf(targets, options)
    elif command == 'endpoints':
        require_targets(targets, command)
        run_endpoints(targets, options)
    elif command == 'scan-dir':
        require_targets(targets, command, 'dir')
        run_scan_dir(targets[0], options)
    elif command == 'fetch':
        require_targets(targets, command, 'url')
        run_fetch(targets[0], options)
    elif command == 'download':
        require_targets(targets, command)
        run_download(targets[0], options)
    elif command == 'httpx':
        require_targets(targets, command)
        run_httpx(targets[0], options)
    else:
        print(f"{Fore.RED}[-] Unknown command: {command}{Style.RESET_ALL}")
        show_help()


if __name__ == '__main__':
    main()
