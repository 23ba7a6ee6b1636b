import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import datetime

import streamlit as st
import pandas as pd
import numpy as np
import plotly.graph_objects as go
import plotly.express as px

from bukukas import settings
from bukukas.accounts import available_categories, available_codes, lookup_account_name
from bukukas.budget import POLICIES, aggregate, report_year
from bukukas.domain import (
    CLASSIFICATION_LABELS,
    CLASSIFICATIONS,
    DISBURSEMENT,
    RECEIPT,
    NotaLine,
    TransactionDraft,
)
from bukukas.errors import ImportParseError, ReconciliationMismatch, ValidationError
from bukukas.filters import auxiliary_search, cash_search, iter_matching, paginate, search_journal
from bukukas.formatting import format_currency, format_date, terbilang_rupiah
from bukukas.journal import account_ledger, journal_totals, ledger_accounts
from bukukas.protocol import AWAITING_NOTA, AWAITING_RECEIPT, DRAFTING, CommitProtocol
from bukukas.reconciliation import closing_summary, reconcile
from bukukas.seed import load_seed
from bukukas.services import default_report_service
from bukukas import spreadsheet
from bukukas.summaries import available_years, monthly_totals, recent_entries, top_entries, year_summary

settings.configure_logging()

st.set_page_config(page_title=settings.APP_NAME, layout="wide")

if "store" not in st.session_state:
    st.session_state.store = load_seed(settings.SEED_PATH)
if "protocol" not in st.session_state:
    st.session_state.protocol = CommitProtocol(st.session_state.store)

store = st.session_state.store
PER_PAGE = 25


def new_protocol():
    alerts = st.session_state.protocol.alerts
    st.session_state.protocol = CommitProtocol(store)
    st.session_state.protocol.alerts.extend(alerts)
    return st.session_state.protocol


def cash_df(entries):
    return pd.DataFrame([
        {
            "Tanggal": format_date(e.date),
            "Kode": e.account_code,
            "Kategori": e.category,
            "Uraian": e.description,
            "Penerimaan": format_currency(e.receipt_amount),
            "Pengeluaran": format_currency(e.disbursement_amount),
            "Saldo": format_currency(e.balance),
        }
        for e in entries
    ])


def download(frame, name, label):
    st.download_button(label, frame.to_csv(index=False), file_name=name, mime="text/csv")


def upload_frame(label, key):
    uploaded = st.file_uploader(label, type=["xlsx", "xls", "csv"], key=key)
    if uploaded is None:
        return None
    if uploaded.name.lower().endswith(".csv"):
        return pd.read_csv(uploaded, dtype=str, keep_default_na=False)
    return pd.read_excel(uploaded)


menu = st.sidebar.radio(
    "Menu",
    [
        "🏠 Dashboard", "📋 Anggaran", "📒 Buku Besar", "📗 Buku Kas Umum",
        "📘 Buku Kas Pembantu", "🧾 Jurnal Umum", "💰 Saldo Akhir",
        "⚖️ Rekonsiliasi", "📑 Laporan Realisasi",
    ],
)

if menu == "🏠 Dashboard":
    st.title(f"🏠 {settings.APP_NAME}")
    year = st.selectbox("Tahun", available_years(store.cash_entries))
    stats = year_summary(store.cash_entries, year)

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Penerimaan", format_currency(stats["total_receipts"]))
    with k2:
        st.metric("Pengeluaran", format_currency(stats["total_disbursements"]))
    with k3:
        st.metric("Saldo", format_currency(stats["balance"]))
    with k4:
        st.metric("Transaksi BKU", len(store.cash_entries))

    months = pd.DataFrame(monthly_totals(store.cash_entries, year))
    net = np.cumsum(months["receipts"].to_numpy() - months["disbursements"].to_numpy())
    fig_ts = go.Figure()
    fig_ts.add_trace(go.Bar(x=months["month"], y=months["receipts"], name="Penerimaan"))
    fig_ts.add_trace(go.Bar(x=months["month"], y=months["disbursements"], name="Pengeluaran"))
    fig_ts.add_trace(go.Scatter(x=months["month"], y=net, mode="lines+markers", name="Arus Kas Kumulatif"))
    fig_ts.update_layout(template="plotly_dark", barmode="group", margin=dict(t=30, b=10, l=10, r=10))
    st.plotly_chart(fig_ts, use_container_width=True)

    col_recent, col_top = st.columns(2)
    with col_recent:
        st.subheader("🕑 Transaksi Terakhir")
        recent = recent_entries(store.cash_entries, 10)
        if recent:
            st.table(cash_df(recent).drop(columns=["Saldo"]))
        else:
            st.info("Belum ada transaksi.")
    with col_top:
        st.subheader("📊 Transaksi Terbesar")
        top = top_entries(store.cash_entries, 5)
        if top:
            fig_top = px.bar(
                x=[e.description for e in top],
                y=[e.amount for e in top],
                labels={"x": "Uraian", "y": "Jumlah (Rp)"},
                template="plotly_dark",
            )
            st.plotly_chart(fig_top, use_container_width=True)

    for alert in st.session_state.protocol.alerts:
        st.warning(alert)

elif menu == "📋 Anggaran":
    st.title("📋 Anggaran")

    with st.form("budget_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            classification = st.selectbox(
                "Kelompok", CLASSIFICATIONS, format_func=lambda c: CLASSIFICATION_LABELS[c]
            )
            label = st.text_input("Kategori")
        with col2:
            code = st.text_input("Kode Rekening", value=settings.DEFAULT_ACCOUNT_CODE)
            amount = st.number_input("Jumlah (Rp)", min_value=0, step=100000)
        if st.form_submit_button("Simpan"):
            try:
                store.add_budget_item(code, label, int(amount), classification)
                st.success("Anggaran ditambahkan")
            except ValidationError as e:
                st.error(str(e))

    for classification in CLASSIFICATIONS:
        items = store.budget_items_for(classification)
        st.subheader(CLASSIFICATION_LABELS[classification])
        if not items:
            st.caption("Belum ada anggaran.")
            continue
        for item in items:
            c1, c2, c3, c4 = st.columns([2, 4, 3, 1])
            c1.write(item.account_code)
            c2.write(item.label)
            c3.write(format_currency(item.amount))
            if c4.button("🗑", key=f"del_{item.id}"):
                store.delete_budget_item(item.id)
                st.rerun()

elif menu == "📒 Buku Besar":
    st.title("📒 Buku Besar")
    protocol = st.session_state.protocol
    codes = available_codes(store.cash_entries)

    if protocol.state not in (AWAITING_RECEIPT, AWAITING_NOTA):
        if protocol.state != DRAFTING:
            protocol = new_protocol()
        with st.form("transaction_form"):
            col1, col2 = st.columns(2)
            with col1:
                date = st.date_input("Tanggal", value=datetime.date.today())
                direction = st.radio(
                    "Jenis", [RECEIPT, DISBURSEMENT],
                    format_func=lambda d: "Penerimaan" if d == RECEIPT else "Pengeluaran",
                    horizontal=True,
                )
                amount = st.number_input("Jumlah (Rp)", min_value=0, step=1000)
            with col2:
                code = st.selectbox("Kode Rekening", [f"{c} - {n}" for c, n in codes])
                category = st.text_input("Kategori")
                purpose = st.text_input("Uraian")
                counterparty = st.text_input("Dari / Kepada")
            if st.form_submit_button("Lanjut"):
                draft = TransactionDraft(date, code, category, purpose, counterparty, int(amount), direction)
                try:
                    protocol.submit(draft)
                    st.rerun()
                except ValidationError as e:
                    for problem in e.problems:
                        st.error(problem)

    elif protocol.state == AWAITING_RECEIPT:
        pending = protocol.pending
        st.subheader("🧾 Kwitansi")
        st.write(f"Telah terima dari **{pending.counterparty}**")
        st.write(f"Uang sejumlah **{format_currency(pending.receipt_amount)}**")
        st.caption(terbilang_rupiah(pending.receipt_amount))
        purpose = st.text_input("Untuk pembayaran", value=protocol.receipt_purpose)
        c1, c2 = st.columns(2)
        if c1.button("✅ Simpan"):
            protocol.confirm_receipt(purpose)
            st.success("Transaksi tersimpan")
            new_protocol()
            st.rerun()
        if c2.button("✖ Batal"):
            protocol.cancel()
            new_protocol()
            st.rerun()

    else:
        pending = protocol.pending
        st.subheader("🧾 Nota")
        st.write(f"{pending.description}: **{format_currency(pending.disbursement_amount)}**")
        voucher = st.text_input("Nomor Nota (opsional)")
        lines_df = st.data_editor(
            pd.DataFrame([{"Nama Barang": "", "Jumlah": 1, "Harga Satuan": pending.disbursement_amount}]),
            num_rows="dynamic",
            key="nota_lines",
        )
        lines = [
            NotaLine(str(r["Nama Barang"] or ""), int(r["Jumlah"] or 0), int(r["Harga Satuan"] or 0))
            for _, r in lines_df.iterrows()
        ]
        st.caption(f"Total Nota: {format_currency(sum(l.total for l in lines))}")
        c1, c2 = st.columns(2)
        if c1.button("✅ Simpan"):
            try:
                protocol.confirm_nota(lines, voucher)
                st.success("Transaksi tersimpan")
                new_protocol()
                st.rerun()
            except ReconciliationMismatch as e:
                st.error(f"{e} ({format_currency(abs(e.difference))})")
            except ValidationError as e:
                st.error(str(e))
        if c2.button("✖ Batal"):
            protocol.cancel()
            new_protocol()
            st.rerun()

    st.divider()
    st.subheader("📖 Buku Besar per Rekening")
    accounts = ledger_accounts(store.journal_rows)
    if accounts:
        code = st.selectbox(
            "Rekening", accounts,
            format_func=lambda c: f"{c} - {lookup_account_name(c).get_or_else('Kode Historis')}",
        )
        ledger = pd.DataFrame(account_ledger(store.journal_rows, code))
        ledger["date"] = ledger["date"].map(format_date)
        for col in ("debit", "credit", "balance"):
            ledger[col] = ledger[col].map(format_currency)
        st.dataframe(ledger, use_container_width=True)
    else:
        st.info("Belum ada posting jurnal.")

elif menu == "📗 Buku Kas Umum":
    st.title("📗 Buku Kas Umum")
    term = st.text_input("Cari uraian / kode")
    entries = list(iter_matching(store.cash_entries, cash_search(term))) if term else list(store.cash_entries)
    page = st.number_input("Halaman", min_value=1, value=1, step=1)
    st.dataframe(cash_df(paginate(entries, int(page), PER_PAGE)), use_container_width=True)

    with st.expander("✏️ Ubah / Hapus"):
        if store.cash_entries:
            entry_id = st.selectbox(
                "Entri", [e.id for e in store.cash_entries],
                format_func=lambda i: f"{i} · {store.get_cash_entry(i).description}",
            )
            entry = store.get_cash_entry(entry_id)
            description = st.text_input("Uraian", value=entry.description, key="bku_desc")
            category = st.text_input("Kategori", value=entry.category, key="bku_cat")
            c1, c2 = st.columns(2)
            if c1.button("Simpan perubahan"):
                store.update_cash_entry(entry_id, description=description, category=category)
                st.rerun()
            if c2.button("Hapus"):
                store.delete_cash_entry(entry_id)
                st.rerun()

    download(spreadsheet.export_cash_entries(store.cash_entries), "bku.csv", "⬇ Download BKU")
    frame = upload_frame("Import BKU", "bku_upload")
    if frame is not None:
        replace = st.checkbox("Ganti seluruh BKU (jurnal dibuat ulang)")
        if st.button("Import BKU"):
            try:
                if replace:
                    result = spreadsheet.replace_cash_entries(store, frame, confirmed=True)
                else:
                    result = spreadsheet.import_cash_entries(store, frame)
                st.success(f"{result.imported} baris diimpor, {result.skipped} dilewati")
                for error in result.errors:
                    st.warning(error)
            except ImportParseError as e:
                st.error(str(e))

elif menu == "📘 Buku Kas Pembantu":
    st.title("📘 Buku Kas Pembantu")
    term = st.text_input("Cari uraian / bukti / kategori")
    entries = list(store.auxiliary_entries)
    if term:
        entries = list(iter_matching(entries, auxiliary_search(term)))
    categories = available_categories(store.auxiliary_entries)
    st.caption(f"{len(categories)} kategori")
    st.dataframe(
        pd.DataFrame([
            {
                "Tanggal": format_date(e.date),
                "Bukti": e.voucher_number,
                "Kategori": e.category,
                "Uraian": e.description,
                "Debet": format_currency(e.debit_amount),
                "Kredit": format_currency(e.credit_amount),
                "Saldo": format_currency(e.balance),
            }
            for e in entries
        ]),
        use_container_width=True,
    )

    download(spreadsheet.export_auxiliary_entries(store.auxiliary_entries), "bkp.csv", "⬇ Download BKP")
    frame = upload_frame("Import BKP", "bkp_upload")
    if frame is not None:
        replace = st.checkbox("Ganti seluruh BKP")
        if st.button("Import BKP"):
            try:
                if replace:
                    result = spreadsheet.replace_auxiliary_entries(store, frame, confirmed=True)
                else:
                    result = spreadsheet.import_auxiliary_entries(store, frame)
                st.success(f"{result.imported} baris diimpor, {result.skipped} dilewati")
            except ImportParseError as e:
                st.error(str(e))

elif menu == "🧾 Jurnal Umum":
    st.title("🧾 Jurnal Umum")
    debit, credit = journal_totals(store.journal_rows)
    k1, k2 = st.columns(2)
    k1.metric("Total Debet", format_currency(debit))
    k2.metric("Total Kredit", format_currency(credit))
    if debit != credit:
        st.warning("Jurnal tidak seimbang")

    term = st.text_input("Cari ID / uraian / kode")
    rows = search_journal(store.journal_rows, term)
    st.dataframe(spreadsheet.export_journal(rows), use_container_width=True)

    with st.form("manual_journal", clear_on_submit=True):
        st.subheader("➕ Pencatatan Manual")
        col1, col2 = st.columns(2)
        with col1:
            day = st.date_input("Tanggal", value=datetime.date.today())
            code = st.text_input("Kode Rekening")
            amount = st.number_input("Jumlah (Rp)", min_value=0, step=1000)
        with col2:
            debit_desc = st.text_input("Uraian Debet")
            credit_desc = st.text_input("Uraian Kredit")
        if st.form_submit_button("Simpan"):
            try:
                store.add_manual_journal(day, code, debit_desc, credit_desc, int(amount))
                st.rerun()
            except ValidationError as e:
                st.error(str(e))

    download(spreadsheet.export_journal(store.journal_rows), "jurnal_umum.csv", "⬇ Download Jurnal")
    frame = upload_frame("Import Jurnal (mengganti seluruh jurnal)", "ju_upload")
    if frame is not None and st.button("Import Jurnal"):
        try:
            result = spreadsheet.replace_journal(store, frame, confirmed=True)
            st.success(f"{result.imported} transaksi diimpor")
        except ImportParseError as e:
            st.error(str(e))

elif menu == "💰 Saldo Akhir":
    st.title("💰 Saldo Akhir")
    col1, col2 = st.columns(2)
    opening = col1.number_input("Saldo Awal (Rp)", min_value=0, step=1000)
    tax = col2.number_input("Setoran Pajak (Rp)", min_value=0, step=1000)
    summary = closing_summary(store.cash_entries, int(opening), int(tax))

    k1, k2, k3 = st.columns(3)
    k1.metric("Jumlah Debet", format_currency(summary.cumulative_debit))
    k2.metric("Jumlah Kredit", format_currency(summary.cumulative_credit))
    k3.metric("Saldo Kas", format_currency(summary.closing_cash))
    st.caption(terbilang_rupiah(summary.closing_cash))

    col_in, col_out = st.columns(2)
    with col_in:
        st.subheader("Penerimaan")
        st.table(pd.DataFrame(
            [{"Kategori": c.name, "Jumlah": format_currency(c.total)} for c in summary.income_by_category]
        ))
    with col_out:
        st.subheader("Pengeluaran")
        if summary.expense_by_category:
            fig = px.pie(
                values=[c.total for c in summary.expense_by_category],
                names=[c.name for c in summary.expense_by_category],
            )
            st.plotly_chart(fig, use_container_width=True)

elif menu == "⚖️ Rekonsiliasi":
    st.title("⚖️ Rekonsiliasi")
    col1, col2 = st.columns(2)
    physical_cash = col1.number_input("Uang Tunai (Rp)", min_value=0, step=1000)
    physical_bank = col2.number_input("Saldo Bank (Rp)", min_value=0, step=1000)
    summary = reconcile(store.cash_entries, store.auxiliary_entries, int(physical_cash), int(physical_bank))

    st.table(pd.DataFrame([
        {"Uraian": "Saldo Awal", "Jumlah": format_currency(summary.opening_balance)},
        {"Uraian": "Penerimaan", "Jumlah": format_currency(summary.total_receipts)},
        {"Uraian": "Dana Dikelola", "Jumlah": format_currency(summary.managed_funds)},
        {"Uraian": "Pengeluaran", "Jumlah": format_currency(summary.total_disbursements)},
        {"Uraian": "Saldo Buku (BKU)", "Jumlah": format_currency(summary.book_balance)},
        {"Uraian": "Saldo BKP", "Jumlah": format_currency(summary.auxiliary_balance)},
        {"Uraian": "Kas Fisik", "Jumlah": format_currency(summary.physical_total)},
        {"Uraian": "Selisih", "Jumlah": format_currency(summary.discrepancy)},
    ]))
    if not summary.books_match:
        st.warning("Saldo BKU tidak sama dengan saldo BKP")
    if summary.discrepancy:
        st.error(f"Selisih kas: {format_currency(summary.discrepancy)}")
    else:
        st.success("Kas sesuai")

elif menu == "📑 Laporan Realisasi":
    st.title("📑 Laporan Realisasi Anggaran")
    st.caption(f"Tahun Anggaran {report_year(store.cash_entries)}")
    policy = st.selectbox("Kategori tanpa anggaran", POLICIES, index=POLICIES.index(settings.REALIZATION_POLICY))
    report = aggregate(store.budget_items, store.cash_entries, policy)

    def report_rows(rows):
        return pd.DataFrame([
            {
                "Kode": r.account_code,
                "Uraian": r.label,
                "Anggaran": format_currency(r.budgeted),
                "Realisasi": format_currency(r.realized),
                "%": f"{r.percentage:.2f}",
            }
            for r in rows
        ])

    for classification in CLASSIFICATIONS:
        st.subheader(CLASSIFICATION_LABELS[classification])
        rows = report.sections[classification] + (report.subtotals[classification],)
        st.table(report_rows(rows))
    st.subheader("Ringkasan")
    st.table(report_rows([report.total_income, report.total_routine, report.total_program, report.surplus_deficit]))
    if report.unbudgeted:
        st.subheader("Realisasi tanpa anggaran")
        st.table(report_rows(report.unbudgeted))

    with st.expander("🔍 Pemeriksaan"):
        checks = default_report_service().period_report(store, policy=policy)
        for v in checks["validation"]:
            for msg in v["messages"]:
                st.warning(msg)
        if not any(v["messages"] for v in checks["validation"]):
            st.success("BKU, BKP dan Jurnal Umum konsisten")
        st.caption(" → ".join(s["calculator"] for s in checks["steps"]))
