from __future__ import annotations

import traceback
from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st

from feedback360 import config
from feedback360.config import APP_NAME, APP_VERSION, DATA_DIR
from feedback360.core.audit import build_audit_snapshot, build_insight_context
from feedback360.core.data_loader import (
    DataLoaderError,
    list_available_files,
    timed_load,
)
from feedback360.core.engine import AggregationParameters, FeedbackResult, build_feedback_result
from feedback360.core.recommendations import generate_recommendations


def _radar_frame(result: FeedbackResult) -> pd.DataFrame:
    """Competencies as rows, collaborators as columns (blank = not rated)."""
    records: List[Dict[str, Any]] = []
    for point in result.radar.points:
        rec: Dict[str, Any] = {"Competência": point.competency.label}
        rec.update(point.collaborator_scores)
        records.append(rec)
    return pd.DataFrame.from_records(records).set_index("Competência")


def _bar_frame(result: FeedbackResult) -> pd.DataFrame:
    rows = [
        {
            "Ponto forte": b.category.label,
            "Precisa melhorar": b.needs_improvement,
            "Atende expectativas": b.as_expected,
            "Supera expectativas": b.exceeds,
            "Total": b.total,
        }
        for b in result.bar
    ]
    # Display order only; the engine returns category order.
    return pd.DataFrame(rows).sort_values("Total", ascending=False, kind="stable")


def _pie_frame(result: FeedbackResult) -> pd.DataFrame:
    return pd.DataFrame(
        [{"Avaliação": p.label, "%": p.percentage, "Cor": p.color} for p in result.pie]
    )


def _keep_zero_default() -> bool:
    """Checkbox starts from FEEDBACK360_RADAR_DROP_ZERO."""
    return not config.RADAR_DROP_ZERO_AVERAGES


def _collect_sources() -> List[Any]:
    st.subheader("Seleção de arquivos CSV")

    available = list_available_files()
    if not available:
        st.caption(f"Nenhum CSV encontrado em {DATA_DIR}.")
    selected = st.multiselect("Arquivos disponíveis", options=available, default=[])

    uploads = st.file_uploader("Upload de novos arquivos", type=["csv"], accept_multiple_files=True)

    urls_text = st.text_area("URLs (uma por linha)", value="", height=80)
    urls = [u.strip() for u in urls_text.splitlines() if u.strip()]

    sources: List[Any] = [DATA_DIR / name for name in selected]
    sources.extend(f.getvalue() for f in (uploads or []))
    sources.extend(urls)
    return sources


def _render_result(result: FeedbackResult) -> None:
    st.subheader("Competências por colaborador")
    st.dataframe(_radar_frame(result), use_container_width=True)
    if result.radar.members_with_no_ratings:
        st.warning("Sem avaliações válidas: " + ", ".join(result.radar.members_with_no_ratings))

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Pontos fortes da equipe")
        st.dataframe(_bar_frame(result), use_container_width=True, hide_index=True)
    with col2:
        st.subheader("Distribuição das avaliações")
        st.dataframe(_pie_frame(result), use_container_width=True, hide_index=True)

    recs = generate_recommendations(result)
    if recs:
        st.subheader("Recomendações")
        for rec in recs:
            st.markdown(f"**[{rec.priority}] {rec.title}**: {rec.description}")


def _render_developer_panels(result: FeedbackResult) -> None:
    with st.expander("Diagnostics (developer view)", expanded=False):
        diag = result.diagnostics
        st.write(f"Rows processed: {diag.rows_processed}")
        st.write(f"Skipped columns: {len(diag.skipped_headers)}")
        if diag.unrecognized_values:
            st.dataframe(
                pd.DataFrame(diag.top_unrecognized(50), columns=["Answer", "Count"]),
                use_container_width=True,
                hide_index=True,
            )

    with st.expander("Audit snapshot (developer view)", expanded=False):
        st.json(build_audit_snapshot(result).to_dict())
        st.download_button(
            "Download insight context (JSON)",
            data=build_insight_context(result),
            file_name="feedback360_context.json",
            mime="application/json",
        )


def run_app() -> None:
    st.set_page_config(page_title=APP_NAME, page_icon="📊", layout="wide")
    st.title(APP_NAME)
    st.caption(f"Prototype version {APP_VERSION}")

    sources = _collect_sources()
    keep_zero = st.checkbox("Manter médias zero no radar", value=_keep_zero_default())

    if not st.button("Processar", disabled=not sources):
        return

    status = st.status("Carregando arquivos…", expanded=False)
    result: Optional[FeedbackResult] = None

    try:
        rows, load_seconds = timed_load(sources)
        status.write(f"{len(rows)} rows loaded in {load_seconds:0.2f}s")

        params = AggregationParameters()
        params.drop_zero_averages = not keep_zero
        result = build_feedback_result(rows, params)
        status.update(label="Done.", state="complete")

    except DataLoaderError as lerr:
        status.update(label="Falha ao carregar.", state="error")
        st.error(f"Erro ao processar os arquivos. Verifique o formato dos CSVs. ({lerr})")
        st.text_area("Traceback", value=traceback.format_exc(), height=220)

    except Exception as e:
        status.update(label="Unexpected error.", state="error")
        st.error("Unexpected error while processing feedback.")
        st.code(repr(e))
        st.text_area("Traceback", value=traceback.format_exc(), height=280)

    if result is not None:
        _render_result(result)
        _render_developer_panels(result)
