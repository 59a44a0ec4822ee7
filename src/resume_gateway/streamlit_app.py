import os

import requests
import streamlit as st

API_BASE = os.getenv("RESUME_GATEWAY_API_BASE", os.getenv("API_BASE", "http://localhost:8080")).rstrip("/")

DEFAULT_LATEX = r"""\documentclass{article}
\usepackage{titlesec}
\usepackage[margin=1in]{geometry}

\titleformat{\section}{\large\bfseries}{}{0em}{}

\begin{document}

\begin{center}
    {\huge\bfseries Jane Doe} \\
    \vspace{0.5em}
    jane.doe@email.com | (555) 123-4567 | San Francisco, CA
\end{center}

\section{Summary}
Software engineer with 5+ years building scalable web applications.

\section{Experience}
\textbf{Senior Software Engineer} \hfill 2021 -- Present \\
\textit{Tech Company Inc.}
\begin{itemize}
    \item Reduced API latency by 40\% through caching
    \item Mentored a team of 4 engineers
\end{itemize}

\section{Education}
\textbf{State University} \hfill 2017 \\
B.S. in Computer Science

\section{Skills}
Python, TypeScript, PostgreSQL, Docker, Kubernetes

\end{document}
"""


def _set_error(prefix: str, resp: requests.Response) -> None:
    st.session_state["error"] = f"{prefix}: {resp.status_code} {resp.text}"


def _compile(latex: str) -> bytes | None:
    try:
        resp = requests.post(f"{API_BASE}/api/v1/resume/compile", json={"latex_code": latex}, timeout=120)
    except requests.RequestException as e:
        st.session_state["error"] = f"Failed to connect to API: {e}"
        return None
    if resp.status_code != 200:
        _set_error("Compilation error", resp)
        return None
    return resp.content


def _generate(prompt: str, latex: str) -> str | None:
    try:
        resp = requests.post(
            f"{API_BASE}/api/v1/resume/generate",
            json={"prompt": prompt, "current_latex": latex},
            timeout=180,
        )
    except requests.RequestException as e:
        st.session_state["error"] = f"Failed to connect to API: {e}"
        return None
    if resp.status_code != 200:
        _set_error("AI generation error", resp)
        return None
    return str(resp.json().get("latex", ""))


def _upload(uploaded_file) -> str | None:
    try:
        files = {"resume": (uploaded_file.name, uploaded_file.getvalue(), uploaded_file.type or "application/octet-stream")}
        resp = requests.post(f"{API_BASE}/api/v1/resume/upload", files=files, timeout=180)
    except requests.RequestException as e:
        st.session_state["error"] = f"Failed to connect to API: {e}"
        return None
    if resp.status_code != 200:
        _set_error("Upload failed", resp)
        return None
    return str(resp.json().get("latex", ""))


def _replace_code(latex: str) -> None:
    # The editor widget owns its value; bump its key so it picks up the new text
    st.session_state["code"] = latex
    st.session_state["editor_key"] = st.session_state.get("editor_key", 0) + 1


def main() -> None:
    st.set_page_config(page_title="Resume Gateway", page_icon="📝", layout="wide")
    st.title("📝 LaTeX Resume Editor")
    st.caption(f"API base: {API_BASE}")

    if "code" not in st.session_state:
        st.session_state["code"] = DEFAULT_LATEX
    st.session_state.pop("error", None)

    with st.form("ai_prompt", clear_on_submit=True):
        prompt = st.text_input("Ask AI to edit your resume")
        submitted = st.form_submit_button("Send", type="primary")
    if submitted and prompt.strip():
        with st.spinner("Generating..."):
            latex = _generate(prompt, st.session_state["code"])
        if latex:
            _replace_code(latex)

    uploaded = st.file_uploader("Upload an existing resume", type=["pdf", "docx", "doc"])
    if uploaded and st.button("Convert to LaTeX"):
        with st.spinner("Converting..."):
            latex = _upload(uploaded)
        if latex:
            _replace_code(latex)

    editor_col, preview_col = st.columns(2)
    with editor_col:
        code = st.text_area(
            "LaTeX source",
            value=st.session_state["code"],
            height=600,
            key=f"editor-{st.session_state.get('editor_key', 0)}",
        )
        st.session_state["code"] = code
    with preview_col:
        if st.button("Recompile"):
            with st.spinner("Compiling..."):
                pdf = _compile(code)
            if pdf is not None:
                st.session_state["pdf"] = pdf
        if "pdf" in st.session_state:
            st.success("Compiled")
            st.download_button(
                label="Download PDF",
                data=st.session_state["pdf"],
                file_name="resume.pdf",
                mime="application/pdf",
            )

    if err := st.session_state.get("error"):
        st.error(err)


if __name__ == "__main__":
    main()
