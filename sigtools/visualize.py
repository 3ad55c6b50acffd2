#!/usr/bin/env python3
"""
Visualization of the solver network.
Builds a networkx graph from the weighted SIF and node attributes, then
writes an interactive plotly HTML page and a static matplotlib figure.
"""

import os
import networkx as nx
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import plotly.graph_objects as go

from sigtools.functions import setup_logger

logger = setup_logger()

sign_colors = {1: '#4DAF4A', -1: '#E41A1C'}
# NodeType as reported by CARNIVAL: S = perturbation, T = measured
node_symbols = {'S': 'square', 'T': 'diamond'}
node_markers = {'S': 's', 'T': 'D'}


def build_graph(weighted_sif, nodes_attributes):
    G = nx.DiGraph()
    for _, row in nodes_attributes.iterrows():
        node_type = row.get('NodeType', '')
        G.add_node(str(row['Node']),
                   AvgAct=float(row['AvgAct']),
                   ZeroAct=float(row['ZeroAct']),
                   UpAct=float(row['UpAct']),
                   DownAct=float(row['DownAct']),
                   NodeType='' if pd.isna(node_type) else str(node_type))
    for _, row in weighted_sif.iterrows():
        G.add_edge(str(row['Node1']), str(row['Node2']),
                   sign=int(row['Sign']), weight=float(row['Weight']))
    return G


def _layout(G):
    return nx.spring_layout(G, k=3 / max(len(G), 1) ** 0.5, iterations=100, seed=42)


def _edge_width(weight, max_weight):
    return 1 + 4 * weight / max_weight if max_weight > 0 else 1


def plot_network_html(G, output_file, title="CARNIVAL network"):
    """
    Write the network as a self-contained interactive HTML file
    """
    pos = _layout(G)
    max_weight = max([d['weight'] for _, _, d in G.edges(data=True)], default=0)

    traces = []
    for u, v, d in G.edges(data=True):
        x0, y0 = pos[u]
        x1, y1 = pos[v]
        traces.append(go.Scatter(
            x=[x0, x1, None], y=[y0, y1, None],
            mode='lines',
            line=dict(width=_edge_width(d['weight'], max_weight),
                      color=sign_colors.get(d['sign'], '#888')),
            hoverinfo='text',
            text=f"{u} -> {v}: sign={d['sign']}, weight={d['weight']:g}",
            showlegend=False,
        ))

    node_x, node_y, node_info, node_color, node_symbol = [], [], [], [], []
    for node, data in G.nodes(data=True):
        x, y = pos[node]
        node_x.append(x)
        node_y.append(y)
        node_color.append(data.get('AvgAct', 0.0))
        node_symbol.append(node_symbols.get(data.get('NodeType', ''), 'circle'))
        node_info.append(
            f"{node}<br>AvgAct={data.get('AvgAct', 0.0):g}<br>"
            f"Up={data.get('UpAct', 0):g} Down={data.get('DownAct', 0):g} "
            f"Zero={data.get('ZeroAct', 0):g}")

    traces.append(go.Scatter(
        x=node_x, y=node_y,
        mode='markers+text',
        text=list(G.nodes()),
        textposition='top center',
        hovertext=node_info,
        hoverinfo='text',
        marker=dict(size=18, color=node_color, symbol=node_symbol,
                    colorscale='RdBu', cmin=-100, cmax=100, showscale=True,
                    colorbar=dict(title='AvgAct'),
                    line=dict(width=1, color='#333')),
        showlegend=False,
    ))

    fig = go.Figure(
        data=traces,
        layout=go.Layout(
            title=dict(text=f"{title} ({G.number_of_nodes()} nodes, {G.number_of_edges()} edges)",
                       font=dict(size=16)),
            hovermode='closest',
            margin=dict(b=20, l=5, r=5, t=40),
            xaxis=dict(showgrid=False, zeroline=False, showticklabels=False),
            yaxis=dict(showgrid=False, zeroline=False, showticklabels=False),
            plot_bgcolor='rgba(0,0,0,0)',
        ),
    )
    os.makedirs(os.path.dirname(os.path.abspath(output_file)), exist_ok=True)
    fig.write_html(output_file, include_plotlyjs=True, full_html=True)
    logger.info(f"Interactive network saved to {output_file}")
    return output_file


def plot_network_png(G, output_file, title="CARNIVAL network"):
    """
    Create a static network plot using matplotlib and networkx
    """
    if len(G.nodes()) == 0:
        logger.warning("No nodes to plot!")
        return None

    os.makedirs(os.path.dirname(os.path.abspath(output_file)), exist_ok=True)
    pos = _layout(G)
    max_weight = max([d['weight'] for _, _, d in G.edges(data=True)], default=0)

    fig, ax = plt.subplots(figsize=(16, 12))
    for node_type in set(nx.get_node_attributes(G, 'NodeType').values()):
        nodelist = [n for n, d in G.nodes(data=True) if d.get('NodeType', '') == node_type]
        nx.draw_networkx_nodes(
            G, pos, nodelist=nodelist, ax=ax,
            node_color=[G.nodes[n]['AvgAct'] for n in nodelist],
            cmap=plt.cm.RdBu, vmin=-100, vmax=100,
            node_shape=node_markers.get(node_type, 'o'),
            node_size=1500, edgecolors='#333')
    nx.draw_networkx_labels(G, pos, ax=ax, font_size=10, font_weight='bold')
    for sign, color in sign_colors.items():
        edgelist = [(u, v) for u, v, d in G.edges(data=True) if d['sign'] == sign]
        if not edgelist:
            continue
        nx.draw_networkx_edges(
            G, pos, edgelist=edgelist, ax=ax, edge_color=color,
            width=[_edge_width(G.edges[e]['weight'], max_weight) for e in edgelist],
            arrows=True, arrowsize=20,
            arrowstyle='-|>' if sign > 0 else '-[')

    legend_elements = [
        plt.Line2D([0], [0], color=sign_colors[1], lw=2, label='Activation'),
        plt.Line2D([0], [0], color=sign_colors[-1], lw=2, label='Inhibition'),
        plt.Line2D([0], [0], marker='s', color='w', markerfacecolor='lightgray',
                   markersize=10, label='Perturbation'),
        plt.Line2D([0], [0], marker='D', color='w', markerfacecolor='lightgray',
                   markersize=10, label='Measured'),
    ]
    ax.legend(handles=legend_elements, loc='upper right')
    ax.set_title(f"{title}\n({len(G.nodes())} nodes, {len(G.edges())} edges)",
                 fontsize=16, fontweight='bold')
    ax.axis('off')
    fig.tight_layout()
    fig.savefig(output_file, dpi=300, bbox_inches='tight')
    plt.close(fig)
    logger.info(f"Network plot saved to {output_file}")

    stats_file = os.path.splitext(output_file)[0] + '_stats.txt'
    with open(stats_file, 'w') as f:
        f.write("Network Statistics\n")
        f.write("==================\n\n")
        f.write(f"Number of nodes: {len(G.nodes())}\n")
        f.write(f"Number of edges: {len(G.edges())}\n")
        f.write(f"Average degree: {sum(dict(G.degree()).values()) / len(G.nodes()):.2f}\n\n")
        f.write("Nodes:\n")
        for node in sorted(G.nodes()):
            f.write(f"  {node} (AvgAct: {G.nodes[node]['AvgAct']:g}, "
                    f"in: {G.in_degree(node)}, out: {G.out_degree(node)})\n")
        f.write("\nEdges:\n")
        for u, v in sorted(G.edges()):
            f.write(f"  {u} -> {v} (sign: {G.edges[u, v]['sign']}, weight: {G.edges[u, v]['weight']:g})\n")
    logger.info(f"Network statistics saved to {stats_file}")
    return output_file
