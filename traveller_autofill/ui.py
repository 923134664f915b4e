"""Streamlit page for editing travellers and filling them in from a document.

Run with ``streamlit run traveller_autofill/ui.py`` while the API is up.
"""

import time

import streamlit as st

from traveller_autofill.client import DEFAULT_API_URL, TravellerApiClient
from traveller_autofill.extractors import ACCEPTED_UPLOADS
from traveller_autofill.form import PROGRESS_CLEAR_DELAY, TravellerForm, UploadProgress
from traveller_autofill.mappings import select_options

TOAST_ICONS = {"success": "✅", "error": "⚠️"}

st.set_page_config(page_title="Resenärer", page_icon="🧳", layout="centered")

# ----- state -----
if "form" not in st.session_state:
    st.session_state.form = TravellerForm()
if "last_upload" not in st.session_state:
    st.session_state.last_upload = None
if "pending_toasts" not in st.session_state:
    st.session_state.pending_toasts = []

form: TravellerForm = st.session_state.form

for note in st.session_state.pending_toasts:
    st.toast(note.message, icon=TOAST_ICONS.get(note.level))
st.session_state.pending_toasts = []


def _select_index(options, value):
    return options.index(value) if value in options else None


# ----- slot list -----
st.title("Uppgifter om resenärer")
for slot in form.slots:
    label = f"{'✅ ' if slot.is_complete else ''}{slot.display_name}"
    if st.button(label, key=f"slot-{slot.id}", use_container_width=True):
        form.select_slot(slot)

# ----- uploader -----
uploaded = st.file_uploader(
    "Fyll i med AI",
    type=[ext.lstrip(".") for ext in ACCEPTED_UPLOADS],
    help="Dra och släpp en fil här, eller klicka för att välja en fil (Text, Excel, Csv, Word, PDF, eller bild)",
)
upload_key = None
if uploaded is not None:
    upload_key = getattr(uploaded, "file_id", None) or (uploaded.name, uploaded.size)

if uploaded is not None and upload_key != st.session_state.last_upload:
    st.session_state.last_upload = upload_key
    bar = st.progress(0, text="")

    def _render(progress: UploadProgress) -> None:
        bar.progress(int(progress.value), text=progress.label)

    progress = UploadProgress(listener=_render)
    client = TravellerApiClient(DEFAULT_API_URL)
    try:
        form.process_upload(
            client,
            uploaded.name,
            uploaded.getvalue(),
            uploaded.type or ACCEPTED_UPLOADS.get(f".{uploaded.name.rsplit('.', 1)[-1].lower()}", "text/plain"),
            progress,
        )
    finally:
        client.close()
    time.sleep(PROGRESS_CLEAR_DELAY)
    progress.clear()
    bar.empty()
    st.session_state.pending_toasts = form.drain_notifications()
    st.rerun()

# ----- editor side panel -----
with st.sidebar:
    if form.is_editor_open:
        edited = form.selected
        st.header("Ändra uppgifter för Vuxen 18+")
        st.caption("Enligt lag behöver vi fråga om namn och födelsedatum på alla resenärer.")
        with st.form(f"editor-{edited.id}"):
            first_name = st.text_input("Förnamn *", value=edited.first_name)
            last_name = st.text_input("Efternamn *", value=edited.last_name)
            date_of_birth = st.text_input("Födelsedatum (8 siffror ÅÅÅÅMMDD) *", value=edited.date_of_birth)
            nationalities = list(select_options("nationality"))
            nationality = st.selectbox(
                "Nationalitet *",
                nationalities,
                index=_select_index(nationalities, edited.nationality),
                placeholder="Välj nationalitet",
            )
            genders = list(select_options("gender"))
            gender = st.selectbox(
                "Kön *", genders, index=_select_index(genders, edited.gender), placeholder="Välj kön"
            )
            disabilities = list(select_options("disability"))
            disability = st.selectbox(
                "Funktionshinder",
                disabilities,
                index=_select_index(disabilities, edited.disability),
                placeholder="Välj funktionshinder",
            )
            member_number = st.text_input("Medlemsnummer", value=edited.member_number)
            st.caption("Fält markerade med * är obligatoriska")
            saved = st.form_submit_button("Spara uppgifter", use_container_width=True)

        if saved:
            form.update_selected("first_name", first_name)
            form.update_selected("last_name", last_name)
            form.update_selected("date_of_birth", date_of_birth)
            form.update_selected("nationality", nationality or "")
            form.update_selected("gender", gender or "")
            form.update_selected("disability", disability or "")
            form.update_selected("member_number", member_number)
            form.save_slot()
            st.rerun()
        if st.button("Stäng"):
            form.close_editor()
            st.rerun()
