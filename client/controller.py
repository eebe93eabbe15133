# client/controller.py
import httpx
import logging
from pydantic import BaseModel
from typing import Callable, Dict, List, Optional

from client.api import StudentApi
from client.form import StudentForm

logger = logging.getLogger(__name__)

EDITOR_CLOSED = "closed"
EDITOR_CREATE = "create"
EDITOR_EDIT = "edit"


class Notification(BaseModel):
    kind: str  # "success" or "error"
    text: str


class DeleteDialog(BaseModel):
    open: bool = False
    student_id: str = ""
    student_name: str = ""
    loading: bool = False


class StudentController:
    """Page state for the student admin screen.

    Holds the listed students and the UI state around them (loading flags,
    the create/edit editor, the delete confirmation) and keeps it in sync
    with the server. Every successful mutation re-fetches the whole list.
    """

    def __init__(self, api: StudentApi, on_notify: Optional[Callable[[Notification], None]] = None):
        self.api = api
        self.on_notify = on_notify
        self.students: List[dict] = []
        self.pagination: Optional[dict] = None
        self.loading = False
        self.search_text = ""
        self.editor_mode = EDITOR_CLOSED
        self.editing: Optional[dict] = None
        self.form_loading = False
        self.delete_dialog = DeleteDialog()
        self.notifications: List[Notification] = []

    @property
    def total_students(self) -> int:
        return len(self.students)

    @property
    def editor_open(self) -> bool:
        return self.editor_mode != EDITOR_CLOSED

    def notify(self, kind: str, text: str):
        notification = Notification(kind=kind, text=text)
        self.notifications.append(notification)
        if self.on_notify:
            self.on_notify(notification)

    async def mount(self):
        await self.fetch_students()

    async def search(self, text: str):
        self.search_text = text
        await self.fetch_students()

    async def fetch_students(self):
        self.loading = True
        try:
            data = await self.api.list_students(self.search_text)
            if data.get("success") and data.get("data"):
                self.students = data["data"]["students"]
                self.pagination = data["data"]["pagination"]
            else:
                self.notify("error", data.get("error") or "Failed to fetch students")
        except httpx.HTTPError as e:
            logger.error(f"Error fetching students: {e}")
            self.notify("error", "Failed to fetch students")
        finally:
            self.loading = False

    def open_create(self):
        self.editing = None
        self.editor_mode = EDITOR_CREATE

    def open_edit(self, student: dict):
        self.editing = student
        self.editor_mode = EDITOR_EDIT

    def close_form(self):
        self.editing = None
        self.editor_mode = EDITOR_CLOSED

    def form_for_editor(self) -> StudentForm:
        if self.editor_mode == EDITOR_EDIT and self.editing:
            return StudentForm.from_student(self.editing)
        return StudentForm()

    async def submit(self, form: StudentForm) -> Dict[str, str]:
        """Send the open editor's form; returns client-side field errors, if any."""
        if not self.editor_open:
            raise RuntimeError("No student form is open")
        errors = form.field_errors()
        if errors:
            return errors

        editing = self.editor_mode == EDITOR_EDIT
        self.form_loading = True
        try:
            if editing:
                data = await self.api.edit_student(self.editing["id"], form.to_payload())
            else:
                data = await self.api.add_student(form.to_payload())

            if data.get("success"):
                default = "Student updated successfully" if editing else "Student added successfully"
                self.notify("success", data.get("message") or default)
                self.close_form()
                await self.fetch_students()
            else:
                self.notify("error", data.get("error") or "Failed to save student")
        except httpx.HTTPError as e:
            logger.error(f"Error submitting student: {e}")
            self.notify("error", "Failed to save student")
        finally:
            self.form_loading = False
        return {}

    def request_delete(self, student_id: str):
        student = next((s for s in self.students if s["id"] == student_id), None)
        self.delete_dialog = DeleteDialog(
            open=True,
            student_id=student_id,
            student_name=student["name"] if student else "this student",
        )

    def cancel_delete(self):
        self.delete_dialog = DeleteDialog()

    async def confirm_delete(self):
        if not self.delete_dialog.open:
            return
        self.delete_dialog.loading = True
        try:
            data = await self.api.delete_student(self.delete_dialog.student_id)
            if data.get("success"):
                self.notify("success", data.get("message") or "Student deleted successfully")
                self.delete_dialog = DeleteDialog()
                await self.fetch_students()
            else:
                self.notify("error", data.get("error") or "Failed to delete student")
        except httpx.HTTPError as e:
            logger.error(f"Error deleting student: {e}")
            self.notify("error", "Failed to delete student")
        finally:
            self.delete_dialog.loading = False
