import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from services.form_document import FormDocument  # noqa: E402


class ManualScheduler:
    """Collect delayed callbacks so tests decide when timers fire."""

    def __init__(self) -> None:
        self.pending = []

    def call_later(self, delay, callback) -> None:
        self.pending.append((delay, callback))

    def run_all(self) -> None:
        while self.pending:
            due, self.pending = self.pending, []
            for _, callback in due:
                callback()


SIGNUP_FORM = """
<html><body>
<form id="signup">
  <label for="first_name">First name</label>
  <input type="text" id="first_name" name="first_name" placeholder="Ada">
  <label>Email address <input type="email" id="contact" name="contact"></label>
  <input type="hidden" name="csrf" value="token">
  <select id="country" name="country">
    <option value="">Choose...</option>
    <option value="us">United States</option>
    <option value="fr">France</option>
  </select>
  <select id="colors" name="colors" multiple>
    <option value="r">Red</option>
    <option value="g">Green</option>
    <option value="b">Blue</option>
  </select>
  <input type="checkbox" id="newsletter" name="newsletter">
  <input type="radio" id="gender_f" name="gender" value="female">
  <input type="radio" id="gender_m" name="gender" value="m">
  <input type="range" id="volume" name="volume" min="0" max="10" value="5">
  <input type="date" id="birthday" name="birthday">
  <input type="datetime-local" id="meeting" name="meeting">
  <div class="rating">
    <input type="text" id="score" name="score" class="rate">
    <span class="star"></span><span class="star"></span><span class="star"></span>
    <span class="star"></span><span class="star"></span>
  </div>
  <textarea id="bio" name="bio"></textarea>
  <input type="submit" value="Send">
</form>
</body></html>
"""


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def signup_document(scheduler: ManualScheduler) -> FormDocument:
    return FormDocument(SIGNUP_FORM, scheduler=scheduler)
