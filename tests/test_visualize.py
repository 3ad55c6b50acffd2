"""Tests for the network plots."""

from sigtools.results import coerce_result
from sigtools.visualize import build_graph, plot_network_html, plot_network_png


def test_build_graph_carries_attributes(raw_result) -> None:
    result = coerce_result(raw_result)

    G = build_graph(result.weighted_sif, result.nodes_attributes)

    assert sorted(G.nodes()) == ["A", "B", "C"]
    assert G.nodes["A"]["NodeType"] == "S"
    assert G.nodes["C"]["AvgAct"] == -100.0
    assert G.edges["B", "C"] == {"sign": 1, "weight": 50.5}


def test_plot_network_html_is_self_contained(tmp_path, raw_result) -> None:
    result = coerce_result(raw_result)
    G = build_graph(result.weighted_sif, result.nodes_attributes)
    path = str(tmp_path / "net.html")

    plot_network_html(G, path)

    with open(path, encoding="utf-8") as f:
        html = f.read()
    assert html.lstrip().lower().startswith("<html")
    assert 'src="https://cdn.plot.ly' not in html
    assert "AvgAct" in html


def test_plot_network_png_writes_stats(tmp_path, raw_result) -> None:
    result = coerce_result(raw_result)
    G = build_graph(result.weighted_sif, result.nodes_attributes)
    path = tmp_path / "net.png"

    plot_network_png(G, str(path))

    assert path.exists()
    stats = (tmp_path / "net_stats.txt").read_text()
    assert "Number of nodes: 3" in stats
    assert "A -> B (sign: 1, weight: 100)" in stats
