"""CLI for the CookinCapital deal analyzer."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .builder import (
    REHAB_TEMPLATES,
    apply_rehab_template,
    build_deal_input,
    default_deal,
    loan_from_ltv,
    validate_deal_input,
)
from .config import (
    get_deal_defaults,
    get_llm_settings,
    get_storage_path,
    get_valuation_settings,
    get_webhook_settings,
    load_config,
)
from .connectors import CRMWebhookConnector, LLMConnector, PropertyValuationConnector
from .models import DealAnalysis, DealInput, Signal
from .storage import Storage, export_csv, export_json, render_worksheet, write_worksheet
from .underwriting import analyze, describe_signal, ltv, within_seventy_percent_rule

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

app = typer.Typer(
    name="cookin-deal",
    help="Fix-and-flip deal analyzer - ROI, 70% rule MAO, and buy/pass signal",
)
console = Console()

_SIGNAL_STYLES = {
    Signal.STRONG_BUY: "bold green",
    Signal.BUY: "green",
    Signal.CONSIDER: "yellow",
    Signal.RENEGOTIATE: "dark_orange",
    Signal.PASS: "red",
}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Analyze fix-and-flip deals."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)


def _get_storage(cfg: dict[str, Any]) -> Storage:
    """Storage instance from config."""
    return Storage(get_storage_path(cfg))


def _load_deal(deal_path: Path, cfg: dict[str, Any]) -> DealInput:
    """Read a YAML/JSON deal file (form keys) onto the configured defaults."""
    if not deal_path.exists():
        console.print(f"[red]Deal file not found: {deal_path}[/red]")
        raise typer.Exit(1)
    try:
        with open(deal_path) as f:
            if deal_path.suffix.lower() == ".json":
                fields = json.load(f)
            else:
                fields = yaml.safe_load(f)
    except (yaml.YAMLError, ValueError) as e:
        console.print(f"[red]Could not parse deal file {deal_path}: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    if not isinstance(fields, dict):
        console.print(f"[red]Deal file must contain a mapping of form fields: {deal_path}[/red]")
        raise typer.Exit(1)
    return build_deal_input(fields, defaults=default_deal(get_deal_defaults(cfg)))


def _money(value: float) -> str:
    return f"-${abs(value):,.0f}" if value < 0 else f"${value:,.0f}"


def _display_analysis(analysis: DealAnalysis) -> None:
    """Print the results panel for one deal."""
    deal = analysis.deal
    c = analysis.calculations
    style = _SIGNAL_STYLES[analysis.signal]

    for problem in validate_deal_input(deal):
        console.print(f"[yellow]Warning: {problem}[/yellow]")

    title = deal.property_info.full_address or "Deal Analysis"
    table = Table(title=title, show_header=False)
    table.add_column("Metric", style="dim")
    table.add_column("Value", justify="right")
    profit_style = "green" if c.total_profit >= 0 else "red"
    table.add_row("Estimated Profit", f"[{profit_style}]{_money(c.total_profit)}[/{profit_style}]")
    table.add_row("ROI", f"{c.roi:.1f}%")
    table.add_row("Cash Required", _money(c.cash_needed))
    table.add_row("Equity at Purchase", _money(c.equity_at_purchase))
    table.add_row("Total Investment", _money(c.total_investment))
    table.add_row("Total Rehab", _money(c.total_rehab_cost))
    table.add_row("Holding Costs", f"{_money(c.total_holding_costs)} ({_money(c.monthly_holding)}/mo)")
    table.add_row("Buying Costs", _money(c.total_buying_costs))
    table.add_row("Selling Costs", _money(c.total_selling_costs))
    table.add_row("Points + Interest", _money(c.points_cost + c.total_interest))
    table.add_row("Monthly Payment", f"${analysis.monthly_payment:,.2f}")
    table.add_row("% of ARV", f"{c.percent_of_arv:.1f}%" if c.percent_of_arv > 0 else "--")
    table.add_row("LTV", f"{ltv(deal):.1f}%" if deal.pricing.purchase_price > 0 else "--")
    table.add_row("Max Allowable Offer", _money(c.max_allowable_offer))
    table.add_row("Profit / Sq Ft", f"${c.profit_per_sqft:,.2f}" if deal.property_info.sqft > 0 else "--")
    console.print(table)

    rule = "within" if within_seventy_percent_rule(deal, c) else "exceeds"
    console.print(
        f"[{style}]{analysis.signal.value}[/{style}]  Grade {analysis.grade.value}  "
        f"[dim]{describe_signal(analysis.signal)} Purchase {rule} the 70% rule.[/dim]"
    )


@app.command()
def new(
    output: Path = typer.Argument(..., help="Where to write the deal file (.yaml or .json)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    sqft: Optional[int] = typer.Option(None, "--sqft", help="Square footage"),
    purchase_price: Optional[int] = typer.Option(None, "--price", help="Purchase price"),
    arv: Optional[int] = typer.Option(None, "--arv", help="After-repair value"),
    template: Optional[str] = typer.Option(
        None, "--template", "-t", help=f"Rehab template: {', '.join(REHAB_TEMPLATES)}"
    ),
    ltv_percent: Optional[float] = typer.Option(None, "--ltv", help="Set loan amount from LTV percent"),
) -> None:
    """Write a new deal file seeded with defaults."""
    cfg = load_config(config_path)
    updates: dict[str, Any] = {}
    if sqft is not None:
        updates["sqft"] = sqft
    if purchase_price is not None:
        updates["purchasePrice"] = purchase_price
    if arv is not None:
        updates["arv"] = arv
    deal = build_deal_input(updates, defaults=default_deal(get_deal_defaults(cfg)))
    if template:
        if template not in REHAB_TEMPLATES:
            console.print(f"[red]Unknown template '{template}'. Choose from: {', '.join(REHAB_TEMPLATES)}[/red]")
            raise typer.Exit(1)
        deal = apply_rehab_template(deal, template)
    if ltv_percent is not None:
        deal = loan_from_ltv(deal, ltv_percent)

    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w") as f:
        if output.suffix.lower() == ".json":
            json.dump(deal.to_dict(), f, indent=2)
        else:
            yaml.safe_dump(deal.to_dict(), f, sort_keys=False)
    console.print(f"[green]Deal file written: {output}[/green]")


@app.command("analyze")
def analyze_cmd(
    deal_path: Path = typer.Argument(..., help="Deal file (.yaml or .json)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    amortizing: bool = typer.Option(False, "--amortizing", help="Show amortizing monthly payment"),
    worksheet_path: Optional[Path] = typer.Option(None, "--worksheet", "-w", help="Also write the text worksheet"),
    json_path: Optional[Path] = typer.Option(None, "--json", help="Also write the analysis as JSON"),
) -> None:
    """Analyze a deal and print the results panel."""
    cfg = load_config(config_path)
    analysis = analyze(_load_deal(deal_path, cfg), amortizing=amortizing)
    _display_analysis(analysis)
    if worksheet_path:
        write_worksheet(analysis, worksheet_path)
        console.print(f"  Worksheet: {worksheet_path}")
    if json_path:
        export_json([analysis], json_path)
        console.print(f"  JSON: {json_path}")


@app.command()
def worksheet(
    deal_path: Path = typer.Argument(..., help="Deal file (.yaml or .json)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
) -> None:
    """Render the plain-text deal worksheet."""
    cfg = load_config(config_path)
    analysis = analyze(_load_deal(deal_path, cfg))
    if output:
        write_worksheet(analysis, output)
        console.print(f"[green]Worksheet written: {output}[/green]")
    else:
        console.print(render_worksheet(analysis), markup=False, highlight=False)


@app.command()
def compare(
    deal_paths: List[Path] = typer.Argument(..., help="Deal files to compare"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    csv_path: Optional[Path] = typer.Option(None, "--csv", help="Export ranked summary to CSV"),
    json_path: Optional[Path] = typer.Option(None, "--json", help="Export full analyses to JSON"),
) -> None:
    """Rank several deals by ROI."""
    cfg = load_config(config_path)
    analyses = [analyze(_load_deal(p, cfg)) for p in deal_paths]
    ranked = sorted(analyses, key=lambda a: (-a.calculations.roi, -a.calculations.total_profit))

    table = Table(title="Deal Comparison")
    table.add_column("Rank", style="dim")
    table.add_column("Address", style="cyan")
    table.add_column("Price", justify="right")
    table.add_column("ARV", justify="right")
    table.add_column("Profit", justify="right")
    table.add_column("ROI", justify="right")
    table.add_column("MAO", justify="right")
    table.add_column("Signal", justify="center")
    table.add_column("Grade", justify="center")
    for i, a in enumerate(ranked, 1):
        addr = a.deal.property_info.full_address
        addr_display = addr[:30] + "..." if len(addr) > 30 else addr
        style = _SIGNAL_STYLES[a.signal]
        table.add_row(
            str(i),
            addr_display,
            _money(a.deal.pricing.purchase_price),
            _money(a.deal.pricing.arv),
            _money(a.calculations.total_profit),
            f"{a.calculations.roi:.1f}%",
            _money(a.calculations.max_allowable_offer),
            f"[{style}]{a.signal.value}[/{style}]",
            a.grade.value,
        )
    console.print(table)

    if csv_path:
        export_csv(ranked, csv_path)
        console.print(f"  CSV:  {csv_path}")
    if json_path:
        export_json(ranked, json_path)
        console.print(f"  JSON: {json_path}")


@app.command()
def save(
    deal_path: Path = typer.Argument(..., help="Deal file (.yaml or .json)"),
    owner: str = typer.Option(..., "--owner", "-u", help="User or session key"),
    deal_id: Optional[str] = typer.Option(None, "--id", help="Existing deal id to overwrite"),
    name: str = typer.Option("", "--name", "-n", help="Display name"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
) -> None:
    """Save a deal's raw inputs for an owner."""
    cfg = load_config(config_path)
    deal = _load_deal(deal_path, cfg)
    storage = _get_storage(cfg)
    try:
        saved_id = storage.save_deal(owner, deal, deal_id=deal_id, name=name)
    finally:
        storage.close()
    console.print(f"[green]Saved deal {saved_id} for {owner}[/green]")


@app.command("list")
def list_deals(
    owner: str = typer.Option(..., "--owner", "-u", help="User or session key"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
) -> None:
    """List saved deals with freshly computed ROI and signal."""
    cfg = load_config(config_path)
    storage = _get_storage(cfg)
    try:
        saved = storage.list_deals(owner)
    finally:
        storage.close()

    if not saved:
        console.print(f"[yellow]No saved deals for {owner}.[/yellow]")
        return

    table = Table(title=f"Saved Deals ({owner})")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Updated", style="dim")
    table.add_column("ROI", justify="right")
    table.add_column("Signal", justify="center")
    for s in saved:
        a = analyze(s.deal)
        style = _SIGNAL_STYLES[a.signal]
        table.add_row(
            s.deal_id,
            s.name or "(unnamed)",
            s.updated_at.strftime("%Y-%m-%d %H:%M"),
            f"{a.calculations.roi:.1f}%",
            f"[{style}]{a.signal.value}[/{style}]",
        )
    console.print(table)


@app.command()
def show(
    deal_id: str = typer.Argument(..., help="Saved deal id"),
    owner: str = typer.Option(..., "--owner", "-u", help="User or session key"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    export_path: Optional[Path] = typer.Option(None, "--export", "-e", help="Write the deal file back out"),
) -> None:
    """Analyze a saved deal."""
    cfg = load_config(config_path)
    storage = _get_storage(cfg)
    try:
        deal = storage.load_deal(owner, deal_id)
    finally:
        storage.close()
    if deal is None:
        console.print(f"[red]Deal not found: {deal_id}[/red]")
        raise typer.Exit(1)
    _display_analysis(analyze(deal))
    if export_path:
        export_path.parent.mkdir(parents=True, exist_ok=True)
        with open(export_path, "w") as f:
            yaml.safe_dump(deal.to_dict(), f, sort_keys=False)
        console.print(f"  Deal file: {export_path}")


@app.command()
def delete(
    deal_id: str = typer.Argument(..., help="Saved deal id"),
    owner: str = typer.Option(..., "--owner", "-u", help="User or session key"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
) -> None:
    """Delete a saved deal."""
    cfg = load_config(config_path)
    storage = _get_storage(cfg)
    try:
        deleted = storage.delete_deal(owner, deal_id)
    finally:
        storage.close()
    if not deleted:
        console.print(f"[red]Deal not found: {deal_id}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Deleted deal {deal_id}[/green]")


@app.command()
def lookup(
    address: str = typer.Option(..., "--address", "-a", help="Street address"),
    city: str = typer.Option(..., "--city", help="City"),
    state: str = typer.Option(..., "--state", help="State code"),
    zip_code: str = typer.Option("", "--zip", help="ZIP code"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
) -> None:
    """Look up an estimated value and comparables for an address."""
    cfg = load_config(config_path)
    settings = get_valuation_settings(cfg)
    connector = PropertyValuationConnector(
        api_key=settings.api_key,
        base_url=settings.base_url,
        comp_count=settings.comp_count,
        timeout_seconds=settings.timeout_seconds,
    )
    result = connector.lookup(address, city, state, zip_code=zip_code)
    if not result.success:
        for e in result.errors:
            console.print(f"[yellow]Warning: {e}[/yellow]")
        return

    console.print(f"[bold]{result.address}[/bold]")
    console.print(f"Estimated value: {_money(result.estimated_value)}")
    if result.value_low is not None and result.value_high is not None:
        console.print(f"[dim]Range: {_money(result.value_low)} - {_money(result.value_high)}[/dim]")
    if result.comparables:
        table = Table(title="Comparables")
        table.add_column("Address", style="cyan")
        table.add_column("Price", justify="right")
        table.add_column("Sq Ft", justify="right")
        table.add_column("Distance", justify="right")
        for comp in result.comparables:
            table.add_row(
                comp.address,
                _money(comp.price),
                f"{comp.sqft:,.0f}" if comp.sqft else "--",
                f"{comp.distance_miles:.2f} mi" if comp.distance_miles is not None else "--",
            )
        console.print(table)


@app.command()
def submit(
    deal_path: Path = typer.Argument(..., help="Deal file (.yaml or .json)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    client_name: str = typer.Option("", "--name", help="Client name"),
    client_email: str = typer.Option("", "--email", help="Client email"),
) -> None:
    """Analyze a deal, then send the analysis and worksheet to the CRM."""
    cfg = load_config(config_path)
    analysis = analyze(_load_deal(deal_path, cfg))
    _display_analysis(analysis)

    settings = get_webhook_settings(cfg)
    connector = CRMWebhookConnector(url=settings.url, timeout_seconds=settings.timeout_seconds)
    results = [
        connector.send_deal_analysis(analysis),
        connector.submit_worksheet(
            analysis, render_worksheet(analysis), client_name=client_name, client_email=client_email
        ),
    ]
    for r in results:
        if r.success:
            console.print(f"[green]Sent {r.event}[/green]")
        else:
            for e in r.errors:
                console.print(f"[yellow]Warning: {e}[/yellow]")


@app.command()
def narrate(
    deal_path: Path = typer.Argument(..., help="Deal file (.yaml or .json)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
) -> None:
    """Analyze a deal, then stream an LLM narrative of the numbers."""
    cfg = load_config(config_path)
    analysis = analyze(_load_deal(deal_path, cfg))
    _display_analysis(analysis)

    settings = get_llm_settings(cfg)
    connector = LLMConnector(
        api_key=settings.api_key,
        base_url=settings.base_url,
        model=settings.model,
        temperature=settings.temperature,
        timeout_seconds=settings.timeout_seconds,
    )
    console.print()
    result = connector.narrate(analysis, on_text=lambda t: console.print(t, end="", markup=False))
    console.print()
    if not result.success:
        for e in result.errors:
            console.print(f"[yellow]Warning: {e}[/yellow]")


if __name__ == "__main__":
    app()
