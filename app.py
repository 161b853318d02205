"""Dosage: medication treatment tracker (Tkinter front end).

This module implements the desktop window around :class:`DosageEngine`:

- Today tab: due doses grouped by time of day; confirm as taken, skip, or add
  a one-time entry.
- History tab: every outcome, newest day first; remove an entry (a dose taken
  today goes back to stock) or export the log to CSV.
- Treatments tab: add / edit / delete treatments; low-stock count in the tab title.
- Summary tab: bar chart of outcomes over the last days.

Two timers run on the Tk event loop: the midnight rollover (missed-dose
backfill) and one reminder per due dose, shown only while the window is
minimized or unfocused.

Data files live in ``DOSAGE_DATA_DIR`` (see dosage_config). Run with:
    python app.py
"""

import logging
from datetime import date
import tkinter as tk
from tkinter import filedialog, messagebox, ttk

import matplotlib

matplotlib.use("TkAgg")
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg
from matplotlib.figure import Figure

from dosage_config import HISTORY_SUMMARY_DAYS, NOTIFY_PRIORITY, clock_is_12, ensure_data_dir
from dosage_engine import DosageEngine
from dose_dates import WEEKDAYS, format_date, parse_day
from dose_errors import DosageError, ValidationError
from dose_models import (
    MISSED,
    SKIPPED,
    TAKEN,
    Cycle,
    Daily,
    Duration,
    Inventory,
    SpecificDays,
    Treatment,
    WhenNeeded,
    format_dose,
    format_slot_time,
    frequency_tag,
    new_treatment,
)
from history_summary import day_sections, export_csv, outcome_counts
from json_storage import JsonStorage
from logging_setup import configure_logging
from recurrence import cycle_position
from reminders import (
    LOW_STOCK_ID,
    PRIORITY_URGENT,
    REMINDER_TITLE,
    Notifier,
    ReminderScheduler,
    arm_dose_reminders,
    arm_midnight,
)
from today_projector import sections

logger = logging.getLogger(__name__)

FREQUENCIES = ["daily", "specific-days", "cycle", "when-needed"]
COLORS = ["default", "red", "orange", "yellow", "green", "cyan", "blue", "purple"]
OUTCOME_COLORS = {TAKEN: "#90ee90", SKIPPED: "#ffcccb", MISSED: "#fff59d"}


class PopupSink:
    """NotificationSink that shows a small always-on-top window."""

    def __init__(self, root: tk.Tk) -> None:
        self.root = root

    def notify(self, event_id: str, title: str, body: str, priority: str) -> None:
        top = tk.Toplevel(self.root)
        top.title(title)
        top.attributes("-topmost", True)
        ttk.Label(top, text=body, style="Bold.TLabel").pack(padx=16, pady=(16, 8))
        ttk.Button(top, text="Close", command=top.destroy).pack(pady=(0, 12))
        if priority == PRIORITY_URGENT:
            self.root.bell()
        logger.info("Notification sent: %s", event_id)


# ---------------- Tkinter app ----------------
class DosageApp(tk.Tk):
    """Main window.

    Responsibilities:
        - Render the engine's projections in four tabs.
        - Forward user actions to the engine and redraw afterwards.
        - Own the midnight and per-dose reminder timers.
    """

    def __init__(self, engine: DosageEngine, clock_is_12: bool = False, priority: str = "normal") -> None:
        super().__init__()
        self.title("Dosage")
        self.geometry("900x640")

        self.engine = engine
        self.clock_is_12 = clock_is_12
        self.scheduler = ReminderScheduler(self)
        self.notifier = Notifier(PopupSink(self), priority)

        # tree iid -> object shown on that row
        self.today_rows: dict[str, object] = {}
        self.history_rows: dict[str, object] = {}
        self.treatment_rows: dict[str, str] = {}

        try:
            style = ttk.Style(self)
            style.theme_use("clam")
            style.configure("Title.TLabel", font=("Segoe UI", 13, "bold"))
            style.configure("Bold.TLabel", font=("Segoe UI", 10, "bold"))
            style.configure("TButton", padding=6)
        except tk.TclError:
            # Theme is cosmetic.
            pass

        self.tabs = ttk.Notebook(self)
        self.tab_today = ttk.Frame(self.tabs, padding=12)
        self.tab_history = ttk.Frame(self.tabs, padding=12)
        self.tab_treatments = ttk.Frame(self.tabs, padding=12)
        self.tab_summary = ttk.Frame(self.tabs, padding=12)
        self.tabs.add(self.tab_today, text="Today")
        self.tabs.add(self.tab_history, text="History")
        self.tabs.add(self.tab_treatments, text="Treatments")
        self.tabs.add(self.tab_summary, text="Summary")
        self.tabs.pack(fill="both", expand=True)

        self._build_today_tab()
        self._build_history_tab()
        self._build_treatments_tab()
        self._build_summary_tab()

        self._refresh_ui()
        arm_midnight(self.scheduler, self.engine.clock, self._on_midnight)

    def is_backgrounded(self) -> bool:
        return self.state() == "iconic" or self.focus_displayof() is None

    # ---------- refresh ----------
    def _refresh_ui(self) -> None:
        """Redraw every tab from the engine and re-arm the dose reminders."""
        today = self.engine.today()
        self._draw_today(today)
        self._draw_history()
        self._draw_treatments()
        self._draw_summary()
        arm_dose_reminders(self.scheduler, self.notifier, today, self.engine.clock(), self.is_backgrounded)
        self._check_inventory()
        self.update_idletasks()

    def _on_midnight(self) -> None:
        self.engine.reconcile()
        self._refresh_ui()

    def _check_inventory(self) -> None:
        low = self.engine.low_stock()
        title = f"Treatments ({len(low)} low)" if low else "Treatments"
        self.tabs.tab(self.tab_treatments, text=title)
        if not low:
            self.notifier.forget(LOW_STOCK_ID)
        elif self.is_backgrounded():
            self.notifier.notify(LOW_STOCK_ID, REMINDER_TITLE, "You have treatments low in stock")

    # ---------- Today tab ----------
    def _build_today_tab(self) -> None:
        ttk.Label(self.tab_today, text="Today", style="Title.TLabel").pack(anchor="w", pady=(0, 8))

        self.today_tree = ttk.Treeview(self.tab_today, columns=["time", "dose"], selectmode="extended", height=16)
        self.today_tree.heading("#0", text="Treatment")
        self.today_tree.heading("time", text="Time")
        self.today_tree.heading("dose", text="Dose")
        self.today_tree.column("#0", width=320)
        self.today_tree.pack(fill="both", expand=True)

        self.today_empty = ttk.Label(self.tab_today, text="")
        self.today_empty.pack(pady=6)

        btns = ttk.Frame(self.tab_today)
        btns.pack(pady=6)
        ttk.Button(btns, text="Confirm", command=lambda: self._record_selected(TAKEN)).pack(side="left", padx=4)
        ttk.Button(btns, text="Skip", command=lambda: self._record_selected(SKIPPED)).pack(side="left", padx=4)
        ttk.Button(btns, text="Unselect", command=lambda: self.today_tree.selection_set(())).pack(side="left", padx=4)
        ttk.Button(btns, text="One-time entry", command=self._open_one_time_entry).pack(side="left", padx=4)

    def _draw_today(self, today) -> None:
        self.today_tree.delete(*self.today_tree.get_children())
        self.today_rows.clear()
        for label, instances in sections(today, self.clock_is_12):
            parent = self.today_tree.insert("", tk.END, text=label, open=True)
            for inst in instances:
                iid = self.today_tree.insert(
                    parent,
                    tk.END,
                    text=inst.name,
                    values=[format_slot_time(inst.time, self.clock_is_12), f"{format_dose(inst.dose)} {inst.unit}"],
                )
                self.today_rows[iid] = inst

        if today:
            self.today_empty.config(text="")
        elif len(self.engine.treatments) == 0:
            self.today_empty.config(text="No treatments added yet!")
        else:
            self.today_empty.config(text="All done for today!")

    def _record_selected(self, outcome: str) -> None:
        chosen = [self.today_rows[i] for i in self.today_tree.selection() if i in self.today_rows]
        if not chosen:
            messagebox.showwarning("Today", "Select one or more doses first.")
            return
        self.engine.record(chosen, outcome)
        self._refresh_ui()

    def _open_one_time_entry(self) -> None:
        top = tk.Toplevel(self)
        top.title("New one-time entry")
        top.grab_set()

        entries = {}
        for row, (label, default) in enumerate([("Name:", ""), ("Unit:", ""), ("Dose:", "1")]):
            ttk.Label(top, text=label).grid(row=row, column=0, sticky="e", padx=6, pady=4)
            ent = ttk.Entry(top, width=28)
            ent.insert(0, default)
            ent.grid(row=row, column=1, sticky="w", padx=6, pady=4)
            entries[label] = ent
        color = ttk.Combobox(top, values=COLORS, width=12, state="readonly")
        color.set("default")
        ttk.Label(top, text="Color:").grid(row=3, column=0, sticky="e", padx=6, pady=4)
        color.grid(row=3, column=1, sticky="w", padx=6, pady=4)

        def save() -> None:
            try:
                dose = float(entries["Dose:"].get())
                self.engine.add_one_time_entry(entries["Name:"].get(), entries["Unit:"].get(), dose, color.get())
            except ValueError:
                messagebox.showerror("One-time entry", "Dose must be a number.", parent=top)
                return
            except ValidationError as exc:
                messagebox.showerror("One-time entry", str(exc), parent=top)
                return
            top.destroy()
            self._refresh_ui()

        ttk.Button(top, text="Save", command=save).grid(row=4, column=1, sticky="w", padx=6, pady=(10, 12))

    # ---------- History tab ----------
    def _build_history_tab(self) -> None:
        ttk.Label(self.tab_history, text="History", style="Title.TLabel").pack(anchor="w", pady=(0, 8))

        self.history_tree = ttk.Treeview(self.tab_history, columns=["time", "dose", "outcome"], height=16)
        self.history_tree.heading("#0", text="Treatment")
        for col in ("time", "dose", "outcome"):
            self.history_tree.heading(col, text=col.capitalize())
        for outcome, color in OUTCOME_COLORS.items():
            self.history_tree.tag_configure(outcome, background=color)
        self.history_tree.pack(fill="both", expand=True)

        btns = ttk.Frame(self.tab_history)
        btns.pack(pady=6)
        ttk.Button(btns, text="Remove selected", command=self._remove_selected_entry).pack(side="left", padx=4)
        ttk.Button(btns, text="Export CSV", command=self._export_history).pack(side="left", padx=4)

    def _draw_history(self) -> None:
        self.history_tree.delete(*self.history_tree.get_children())
        self.history_rows.clear()
        today = self.engine.clock().date()
        for day, entries in day_sections(self.engine.history):
            label = "Today" if day == today else day.strftime("%a %d %b %Y")
            parent = self.history_tree.insert("", tk.END, text=label, open=day == today)
            for entry in entries:
                iid = self.history_tree.insert(
                    parent,
                    tk.END,
                    text=entry.name,
                    values=[
                        format_slot_time(entry.time, self.clock_is_12),
                        f"{format_dose(entry.dose)} {entry.unit}",
                        entry.outcome,
                    ],
                    tags=(entry.outcome,),
                )
                self.history_rows[iid] = entry

    def _remove_selected_entry(self) -> None:
        chosen = [self.history_rows[i] for i in self.history_tree.selection() if i in self.history_rows]
        if not chosen:
            messagebox.showwarning("History", "Please select an entry.")
            return
        for entry in chosen:
            self.engine.remove_entry(entry)
        self._refresh_ui()

    def _export_history(self) -> None:
        path = filedialog.asksaveasfilename(
            defaultextension=".csv",
            initialfile=f"dosage-history-{format_date(date.today())}.csv",
            filetypes=[("CSV", "*.csv")],
        )
        if not path:
            return
        try:
            export_csv(self.engine.history, path)
        except OSError as exc:
            messagebox.showerror("Export", f"Could not write {path}:\n{exc}")
            return
        messagebox.showinfo("Export", f"History exported to {path}")

    # ---------- Treatments tab ----------
    def _build_treatments_tab(self) -> None:
        ttk.Label(self.tab_treatments, text="Treatments", style="Title.TLabel").pack(anchor="w", pady=(0, 8))

        cols = ["unit", "frequency", "doses", "stock"]
        self.treatments_tree = ttk.Treeview(self.tab_treatments, columns=cols, height=16)
        self.treatments_tree.heading("#0", text="Name")
        for col in cols:
            self.treatments_tree.heading(col, text=col.capitalize())
        self.treatments_tree.tag_configure("low", background="#ffcccb")
        self.treatments_tree.pack(fill="both", expand=True)

        btns = ttk.Frame(self.tab_treatments)
        btns.pack(pady=6)
        ttk.Button(btns, text="New", command=lambda: TreatmentDialog(self)).pack(side="left", padx=4)
        ttk.Button(btns, text="Edit selected", command=self._edit_selected_treatment).pack(side="left", padx=4)
        ttk.Button(btns, text="Delete selected", command=self._delete_selected_treatment).pack(side="left", padx=4)

    def _draw_treatments(self) -> None:
        self.treatments_tree.delete(*self.treatments_tree.get_children())
        self.treatment_rows.clear()
        for t in self.engine.treatments.sorted():
            doses = ", ".join(f"{format_slot_time(s.time, self.clock_is_12)} × {format_dose(s.dose)}" for s in t.slots)
            stock = f"{format_dose(t.inventory.current)}" if t.inventory.enabled else ""
            iid = self.treatments_tree.insert(
                "",
                tk.END,
                text=t.name,
                values=[t.unit, frequency_tag(t.frequency), doses, stock],
                tags=("low",) if t.inventory.is_low else (),
            )
            self.treatment_rows[iid] = t.name

    def _selected_treatment(self) -> Treatment | None:
        sel = self.treatments_tree.selection()
        if not sel:
            messagebox.showwarning("Treatments", "Please select a treatment in the table.")
            return None
        return self.engine.treatments.get(self.treatment_rows.get(sel[0], ""))

    def _edit_selected_treatment(self) -> None:
        treatment = self._selected_treatment()
        if treatment is not None:
            TreatmentDialog(self, treatment)

    def _delete_selected_treatment(self) -> None:
        treatment = self._selected_treatment()
        if treatment is None:
            return
        if not messagebox.askyesno("Delete", f"Are you sure you want to delete {treatment.name}?"):
            return
        self.engine.delete_treatment(treatment.name)
        self._refresh_ui()

    # ---------- Summary tab ----------
    def _build_summary_tab(self) -> None:
        ttk.Label(
            self.tab_summary,
            text=f"Summary (last {HISTORY_SUMMARY_DAYS} days)",
            style="Title.TLabel",
        ).pack(anchor="w", pady=(0, 8))
        self.summary_container = ttk.Frame(self.tab_summary)
        self.summary_container.pack(fill="both", expand=True)

    def _draw_summary(self) -> None:
        """Render a bar chart of taken/skipped/missed counts."""
        for w in self.summary_container.winfo_children():
            w.destroy()

        counts = outcome_counts(self.engine.history, self.engine.clock(), HISTORY_SUMMARY_DAYS)

        fig = Figure(figsize=(5.6, 3.4), dpi=120)
        ax = fig.add_subplot(111)
        ax.bar(list(counts.keys()), list(counts.values()), color=[OUTCOME_COLORS[k] for k in counts])
        ax.set_title(f"Doses in last {HISTORY_SUMMARY_DAYS} days")
        ax.set_ylabel("Count")

        canvas = FigureCanvasTkAgg(fig, master=self.summary_container)
        canvas.draw()
        canvas.get_tk_widget().pack()


class TreatmentDialog(tk.Toplevel):
    """Add/Edit form for one treatment."""

    def __init__(self, app: DosageApp, treatment: Treatment | None = None) -> None:
        super().__init__(app)
        self.app = app
        self.original = treatment
        self.title("Edit treatment" if treatment else "New treatment")
        self.grab_set()
        self.doses: list[tuple[tuple[int, int], float]] = []

        self.ent_name = self._entry("Name:", 0)
        self.ent_unit = self._entry("Unit:", 1)
        self.ent_notes = self._entry("Notes:", 2)

        ttk.Label(self, text="Color:").grid(row=3, column=0, sticky="e", padx=6, pady=4)
        self.cb_color = ttk.Combobox(self, values=COLORS, width=12, state="readonly")
        self.cb_color.set("default")
        self.cb_color.grid(row=3, column=1, sticky="w", padx=6, pady=4)

        ttk.Label(self, text="Frequency:").grid(row=4, column=0, sticky="e", padx=6, pady=4)
        self.cb_freq = ttk.Combobox(self, values=FREQUENCIES, width=16, state="readonly")
        self.cb_freq.set("daily")
        self.cb_freq.grid(row=4, column=1, sticky="w", padx=6, pady=4)

        # Specific days, Sunday first
        daysf = ttk.Frame(self)
        daysf.grid(row=5, column=1, columnspan=3, sticky="w", padx=6)
        self.day_vars = [tk.BooleanVar(value=False) for _ in WEEKDAYS]
        for i, d in enumerate(WEEKDAYS):
            ttk.Checkbutton(daysf, text=d, variable=self.day_vars[i]).grid(row=0, column=i, padx=(0, 6))

        cyclef = ttk.Frame(self)
        cyclef.grid(row=6, column=1, columnspan=3, sticky="w", padx=6, pady=4)
        self.sp_active = self._spin(cyclef, "Cycle active", 1, 365, 21)
        self.sp_inactive = self._spin(cyclef, "inactive", 0, 365, 7)
        self.sp_current = self._spin(cyclef, "today is day", 1, 730, 1)

        # Dose times
        timef = ttk.Frame(self)
        timef.grid(row=7, column=1, columnspan=3, sticky="w", padx=6, pady=4)
        self.cb_hour = ttk.Combobox(timef, values=[f"{h:02d}" for h in range(24)], width=4, state="readonly")
        self.cb_hour.set("08")
        self.cb_hour.pack(side="left")
        ttk.Label(timef, text=":").pack(side="left")
        self.cb_minute = ttk.Combobox(timef, values=[f"{m:02d}" for m in range(0, 60, 5)], width=4, state="readonly")
        self.cb_minute.set("00")
        self.cb_minute.pack(side="left")
        self.sp_dose = self._spin(timef, "dose", 0.25, 100, 1, increment=0.25)
        ttk.Button(timef, text="Add time", command=self._add_dose).pack(side="left", padx=(6, 0))
        ttk.Label(self, text="Doses:").grid(row=8, column=0, sticky="ne", padx=6, pady=4)
        self.lst_doses = tk.Listbox(self, height=4, width=22)
        self.lst_doses.grid(row=8, column=1, sticky="w", padx=6, pady=4)
        ttk.Button(self, text="Remove selected", command=self._remove_dose).grid(row=8, column=2, sticky="w")

        invf = ttk.Frame(self)
        invf.grid(row=9, column=1, columnspan=3, sticky="w", padx=6, pady=4)
        self.var_inventory = tk.BooleanVar(value=False)
        ttk.Checkbutton(invf, text="Track inventory", variable=self.var_inventory).pack(side="left")
        self.sp_stock = self._spin(invf, "current", 0, 9999, 0)
        self.sp_reminder = self._spin(invf, "remind at", 0, 9999, 0)

        durf = ttk.Frame(self)
        durf.grid(row=10, column=1, columnspan=3, sticky="w", padx=6, pady=4)
        self.var_duration = tk.BooleanVar(value=False)
        ttk.Checkbutton(durf, text="Duration", variable=self.var_duration).pack(side="left")
        today = format_date(app.engine.clock())
        self.ent_start = self._inline_entry(durf, "from", today)
        self.ent_end = self._inline_entry(durf, "to", today)

        ttk.Button(self, text="Save", command=self._save).grid(row=11, column=1, sticky="w", padx=6, pady=(10, 12))

        if treatment is not None:
            self._load(treatment)

    # ---- small widget helpers ----
    def _entry(self, label: str, row: int) -> ttk.Entry:
        ttk.Label(self, text=label).grid(row=row, column=0, sticky="e", padx=6, pady=4)
        ent = ttk.Entry(self, width=32)
        ent.grid(row=row, column=1, columnspan=2, sticky="w", padx=6, pady=4)
        return ent

    def _inline_entry(self, parent, label: str, value: str) -> ttk.Entry:
        ttk.Label(parent, text=label).pack(side="left", padx=(8, 2))
        ent = ttk.Entry(parent, width=11)
        ent.insert(0, value)
        ent.pack(side="left")
        return ent

    def _spin(self, parent, label: str, lo, hi, value, increment=1) -> ttk.Spinbox:
        ttk.Label(parent, text=label).pack(side="left", padx=(8, 2))
        sp = ttk.Spinbox(parent, from_=lo, to=hi, increment=increment, width=6)
        sp.set(value)
        sp.pack(side="left")
        return sp

    # ---- doses list ----
    def _redraw_doses(self) -> None:
        self.doses.sort()
        self.lst_doses.delete(0, tk.END)
        for t, dose in self.doses:
            self.lst_doses.insert(tk.END, f"{format_slot_time(t)}  ×  {format_dose(dose)}")

    def _add_dose(self) -> None:
        try:
            dose = float(self.sp_dose.get())
        except ValueError:
            messagebox.showerror("Dose", "Dose must be a number.", parent=self)
            return
        self.doses.append(((int(self.cb_hour.get()), int(self.cb_minute.get())), dose))
        self._redraw_doses()

    def _remove_dose(self) -> None:
        sel = self.lst_doses.curselection()
        if sel:
            del self.doses[sel[0]]
            self._redraw_doses()

    # ---- load / save ----
    def _load(self, t: Treatment) -> None:
        self.ent_name.insert(0, t.name)
        self.ent_unit.insert(0, t.unit)
        self.ent_notes.insert(0, t.notes)
        self.cb_color.set(t.color)
        self.cb_freq.set(frequency_tag(t.frequency))
        if isinstance(t.frequency, SpecificDays):
            for i, var in enumerate(self.day_vars):
                var.set(i in t.frequency.days)
        if isinstance(t.frequency, Cycle):
            self.sp_active.set(t.frequency.active)
            self.sp_inactive.set(t.frequency.inactive)
            self.sp_current.set(cycle_position(t.frequency, self.app.engine.clock().date()) + 1)
        self.doses = [(s.time, s.dose) for s in t.slots]
        self._redraw_doses()
        self.var_inventory.set(t.inventory.enabled)
        self.sp_stock.set(t.inventory.current)
        self.sp_reminder.set(t.inventory.reminder)
        self.var_duration.set(t.duration.enabled)
        self.ent_start.delete(0, tk.END)
        self.ent_start.insert(0, format_date(t.duration.start))
        if t.duration.end:
            self.ent_end.delete(0, tk.END)
            self.ent_end.insert(0, format_date(t.duration.end))

    def _build(self) -> Treatment:
        now = self.app.engine.clock()
        freq_tag = self.cb_freq.get()
        if freq_tag == "specific-days":
            frequency = SpecificDays(frozenset(i for i, v in enumerate(self.day_vars) if v.get()))
        elif freq_tag == "cycle":
            frequency = Cycle(
                active=int(self.sp_active.get()),
                inactive=int(self.sp_inactive.get()),
                current=int(self.sp_current.get()) - 1,
                anchor=now.date(),
            )
        elif freq_tag == "when-needed":
            frequency = WhenNeeded()
        else:
            frequency = Daily()

        if self.var_duration.get():
            duration = Duration(
                start=parse_day(self.ent_start.get()),
                end=parse_day(self.ent_end.get()),
                enabled=True,
            )
        else:
            start = self.original.duration.start if self.original else now.date()
            duration = Duration(start=start)

        return new_treatment(
            name=self.ent_name.get(),
            unit=self.ent_unit.get(),
            frequency=frequency,
            doses=[] if isinstance(frequency, WhenNeeded) else list(self.doses),
            now=now,
            inventory=Inventory(
                enabled=self.var_inventory.get(),
                current=float(self.sp_stock.get()),
                reminder=float(self.sp_reminder.get()),
            ),
            duration=duration,
            color=self.cb_color.get(),
            icon=self.original.icon if self.original else "pill",
            notes=self.ent_notes.get().strip(),
        )

    def _save(self) -> None:
        try:
            treatment = self._build()
            if self.original is None:
                self.app.engine.add_treatment(treatment)
            else:
                self.app.engine.update_treatment(self.original.name, treatment)
        except ValueError as exc:
            messagebox.showerror("Treatment", f"Invalid value: {exc}", parent=self)
            return
        except DosageError as exc:
            messagebox.showerror("Treatment", str(exc), parent=self)
            return
        self.destroy()
        self.app._refresh_ui()


# ---------------- main ----------------
def main() -> None:
    data_dir = ensure_data_dir()
    configure_logging(data_dir)
    engine = DosageEngine(JsonStorage(data_dir))
    engine.start()
    app = DosageApp(engine, clock_is_12=clock_is_12(), priority=NOTIFY_PRIORITY)
    app.mainloop()


if __name__ == "__main__":
    main()
