#!/usr/bin/env python3
"""
aihttp.py: command-line driver for the AI HTTP tester
=====================================================

Ask a model about a captured HTTP request, relay it with a payload applied,
run a batch of payloads with per-response verdicts, start the backend, or
check a local Ollama install.

Features:
- Discovery and analysis modes chosen from the prompt (or forced with --mode)
- Payload placement at [INJECT], a named parameter, or the first body field
- Rich-powered output with detailed file logging

Example
~~~~~~~
```bash
python aihttp.py --ask "Find injection points" -r request.txt
python aihttp.py --send -r request.txt --payload "' OR 1=1--" --param id --analyze
python aihttp.py --fuzz "SQL injection" -r request.txt --analyze -o history.json
python aihttp.py --diagnose
```
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
import time
from pathlib import Path
from typing import Any, List, Optional

import httpx

from logging_setup import setup_logging, extract_target_name, RichOutput, BasicOutput, QuietOutput
from models.pydantic_models import (
    PAYLOAD_SOFT_CAP,
    AnalyzeRequest,
    CombinedReport,
    Mode,
    PayloadReport,
)
from prompts.prompts import PAYLOAD_GENERATION_QUESTION
from security_agents import ModelEndpointError, PayloadFuzzAgent, ResponseVerdictAgent, analyze_with_ai
from tools.config import PROXY_MAX_REDIRECTS, PROXY_TIMEOUT
from tools.diagnostics import run_diagnostics
from tools.parsers import apply_payload, parse_http_request, reconstruct_http_request
from tools.proxy import ProxyError, render_response_text, send_http_request


# ---------------------------------------------------------------------------
# Runners
# ---------------------------------------------------------------------------

async def run_ask(args, output, raw_request: Optional[str]):
    """Send a free-form prompt, with the raw request as context when given."""
    request = AnalyzeRequest(prompt=args.ask, context=raw_request, mode=args.mode)
    with output.scanning_phase("🤖 AI", "Waiting for the model..."):
        resp = await analyze_with_ai(request)
    output.print_outcome(resp)
    return resp.to_wire()


async def run_send(args, output, raw_request: str):
    """Relay one request, optionally with a payload, and optionally judge the response."""
    request = parse_http_request(raw_request, args.scheme)
    if args.payload:
        request = apply_payload(request, args.payload[0], args.param)

    with output.scanning_phase("📡 Send", f"{request.method} {request.url}"):
        resp = await send_http_request(request, proxy=args.proxy, insecure=args.insecure)
    output.print_proxy_response(resp)
    result: dict = {"request": request.to_wire(), "response": resp.to_wire()}

    if args.analyze:
        with output.scanning_phase("🛡️  Analysis", "Judging the response..."):
            analysis = await ResponseVerdictAgent().run(
                reconstruct_http_request(request), render_response_text(resp)
            )
        output.print_outcome(analysis)
        result["analysis"] = analysis.to_wire()
    return result


async def generate_payloads(args, output, raw_request: str) -> List[str]:
    request = AnalyzeRequest(
        prompt=PAYLOAD_GENERATION_QUESTION.format(vulnerability=args.fuzz),
        context=raw_request,
        mode=Mode.DISCOVERY,
    )
    with output.scanning_phase("🎯 Payloads", f"Generating {args.fuzz} payloads..."):
        resp = await analyze_with_ai(request)
    output.print_outcome(resp)
    if not isinstance(resp.data, (PayloadReport, CombinedReport)) or not resp.data.payloads:
        raise RuntimeError("The AI reply did not contain any payloads")
    return resp.data.payloads


async def run_fuzz(args, output, raw_request: str):
    """Generate (or take) payloads, send each one and record the session history."""
    payloads = args.payload or await generate_payloads(args, output, raw_request)

    client_args: dict = {"follow_redirects": True, "max_redirects": PROXY_MAX_REDIRECTS,
                         "timeout": PROXY_TIMEOUT}
    if args.proxy:
        client_args["proxy"] = args.proxy
    if args.insecure:
        client_args["verify"] = False

    async with httpx.AsyncClient(**client_args) as client:
        agent = PayloadFuzzAgent(client, analyze=args.analyze, max_payloads=args.max_payloads)
        with output.scanning_phase("🚀 Testing", f"Sending {min(len(payloads), args.max_payloads)} payloads..."):
            history = await agent.run(raw_request, payloads, parameter=args.param, scheme_override=args.scheme)
    output.print_history(history)
    return [entry.to_wire() for entry in history]


async def run_diagnose(args, output):
    report = await run_diagnostics()
    output.print_diagnostics(report)
    if not report.ready:
        raise RuntimeError("Ollama is not ready; see the checks above")
    return report.model_dump()


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AI-assisted HTTP request crafting and security testing.")
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--ask", metavar="PROMPT", help="Ask the AI about a request (use -r to give it context)")
    mode.add_argument("--send", action="store_true", help="Send the request from -r, with --payload applied if given")
    mode.add_argument("--fuzz", metavar="VULN", help="Generate payloads for VULN and send each one")
    mode.add_argument("--serve", action="store_true", help="Run the backend HTTP server")
    mode.add_argument("--diagnose", action="store_true", help="Check the local Ollama install and models")
    parser.add_argument("-r", "--request", type=Path, help="Raw HTTP request file")
    parser.add_argument("--payload", action="append",
                        help="Payload to apply (repeat for --fuzz to skip AI generation)")
    parser.add_argument("--param", help="Parameter that receives the payload (JSON key, form field, header or query)")
    parser.add_argument("--analyze", action="store_true", help="Ask the AI for a verdict on each response")
    parser.add_argument("--mode", choices=[m.value for m in Mode], help="Force discovery or analysis mode for --ask")
    parser.add_argument("--scheme", choices=["http", "https"], help="Force scheme when parsing --request")
    parser.add_argument("--proxy", help="Proxy URL (e.g. http://localhost:8080 or socks5://127.0.0.1:1080)")
    parser.add_argument("--insecure", action="store_true", help="Skip TLS certificate verification")
    parser.add_argument("--max-payloads", type=int, default=PAYLOAD_SOFT_CAP,
                        help=f"Maximum payloads to send with --fuzz (default {PAYLOAD_SOFT_CAP})")
    parser.add_argument("-o", "--output", type=Path, help="Save JSON results to file")
    parser.add_argument("--quiet", "-q", action="store_true", help="Quiet mode - minimal output")
    parser.add_argument("--basic", action="store_true", help="Use plain text output")
    return parser


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.serve:
        from aihttp_server import main as serve
        serve()
        return

    if (args.send or args.fuzz) and not args.request:
        parser.error("--send and --fuzz need a raw request file (-r)")
    if args.request and not args.request.is_file():
        parser.error(f"request file not found: {args.request}")
    if args.max_payloads < 1:
        parser.error("--max-payloads must be at least 1")

    async def async_main():
        raw_request = args.request.read_text() if args.request else None

        # Set up logging to file
        log_path = setup_logging(raw_request)
        target_name = extract_target_name(raw_request)

        if args.quiet:
            output = QuietOutput()
        elif args.basic:
            output = BasicOutput()
        else:
            output = RichOutput()

        start_time = time.time()

        if not args.quiet:
            output.print_banner()
            output.print_target_info(target_name, log_path)

        result: Any = None
        try:
            if args.ask:
                result = await run_ask(args, output, raw_request)
            elif args.send:
                result = await run_send(args, output, raw_request)
            elif args.fuzz:
                result = await run_fuzz(args, output, raw_request)
            else:
                result = await run_diagnose(args, output)
        except (ProxyError, ModelEndpointError) as exc:
            output.print_error(f"{exc.error}: {exc.message}", log_path)
            sys.exit(1)
        except (ValueError, RuntimeError) as exc:
            output.print_error(str(exc), log_path)
            sys.exit(1)

        if not args.quiet:
            output.print_summary(log_path, time.time() - start_time, target_name)

        # Save output if requested
        if args.output:
            args.output.write_text(json.dumps(result, indent=2, ensure_ascii=False))
            if not args.quiet:
                print(f"\n💾 Full results saved to: {args.output}")
        elif args.quiet:
            print(json.dumps(result, indent=2, ensure_ascii=False))

    asyncio.run(async_main())


if __name__ == "__main__":
    main()
