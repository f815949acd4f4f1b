import tkinter as tk
from tkinter import scrolledtext

from chatdesk_core.api.context import AppContext
from chatdesk_core.api.dispatcher import CommandDispatcher
from chatdesk_core.api.events import CONVERSATION_TITLE_CHANGED
from chatdesk_core.gui.window_state import WindowState, WindowStateStore
from chatdesk_core.infrastructure.logging.logger import logger


class App:
    def __init__(self, root, ctx: AppContext, dispatcher: CommandDispatcher):
        self.root = root
        self.root.title("ChatDesk")
        self.ctx = ctx
        self.dispatcher = dispatcher
        self.window_state = WindowStateStore(ctx.settings.storage_root)
        self.root.geometry(self.window_state.load().geometry)
        self.root.protocol("WM_DELETE_WINDOW", self.on_close)
        self.conv_ids: list[str] = []
        self.titles: dict[str, str] = {}
        self.conv_id = None
        self.sending = False
        main = tk.PanedWindow(root, orient=tk.HORIZONTAL)
        main.pack(fill=tk.BOTH, expand=True)
        left = tk.Frame(main)
        right = tk.Frame(main)
        main.add(left, minsize=260)
        main.add(right)
        tk.Label(left, text="会话").pack(anchor=tk.W)
        self.conv_list = tk.Listbox(left, height=16, exportselection=False)
        self.conv_list.pack(fill=tk.BOTH, expand=True)
        self.conv_list.bind("<<ListboxSelect>>", self.on_select_conv)
        lf_btns = tk.Frame(left)
        lf_btns.pack(fill=tk.X)
        tk.Button(lf_btns, text="刷新", command=self.refresh_convs).pack(side=tk.LEFT)
        tk.Button(lf_btns, text="新建", command=self.create_conv).pack(side=tk.LEFT)
        lf_rename = tk.Frame(left)
        lf_rename.pack(fill=tk.X)
        self.title_entry = tk.Entry(lf_rename)
        self.title_entry.pack(side=tk.LEFT, fill=tk.X, expand=True)
        self.title_entry.bind("<Return>", lambda e: self.on_rename() or "break")
        tk.Button(lf_rename, text="重命名", command=self.on_rename).pack(side=tk.LEFT)
        self.chat = scrolledtext.ScrolledText(right, width=80, height=22)
        self.chat.pack(fill=tk.BOTH, expand=True)
        self.chat.tag_config("user", foreground="#1a73e8")
        self.chat.tag_config("assistant", foreground="#34a853")
        self.chat.tag_config("system", foreground="#5f6368")
        self.chat.tag_config("error", foreground="#d93025")
        rt_in = tk.Frame(right)
        rt_in.pack(fill=tk.X)
        self.entry = tk.Entry(rt_in)
        self.entry.pack(side=tk.LEFT, fill=tk.X, expand=True)
        self.entry.bind("<Return>", self.on_send_event)
        self.send_btn = tk.Button(rt_in, text="发送", command=self.on_send)
        self.send_btn.pack(side=tk.LEFT)
        rt_greet = tk.Frame(right)
        rt_greet.pack(fill=tk.X)
        tk.Label(rt_greet, text="name").pack(side=tk.LEFT)
        self.name_entry = tk.Entry(rt_greet)
        self.name_entry.pack(side=tk.LEFT, fill=tk.X, expand=True)
        tk.Button(rt_greet, text="问候", command=self.on_greet).pack(side=tk.LEFT)
        self.status = tk.Label(right, text="准备就绪", anchor=tk.W)
        self.status.pack(fill=tk.X)
        self._unsubscribe = ctx.events.subscribe(
            CONVERSATION_TITLE_CHANGED,
            lambda payload: self.root.after(0, lambda: self.on_title_changed(payload)),
        )
        self.refresh_convs()

    # 命令在线程池执行，结果切回 Tk 主线程
    def call(self, name, *args, on_ok=None, on_err=None):
        future = self.dispatcher.invoke(name, *args)
        future.add_done_callback(lambda f: self.root.after(0, lambda: self._deliver(name, f, on_ok, on_err)))

    def _deliver(self, name, future, on_ok, on_err=None):
        err = future.exception()
        message = f"{name}: {err}" if err is not None else None
        if message is None:
            outcome = future.result()
            if not outcome.ok:
                message = outcome.error
        if message is not None:
            self.show_error(message)
            if on_err:
                on_err(message)
            return
        if on_ok:
            on_ok(outcome.value)

    def show_error(self, message):
        self.chat.insert(tk.END, f"错误: {message}\n", "error")
        self.chat.see(tk.END)
        self.status.config(text="错误")

    def finish_sending(self, *_):
        self.sending = False
        self.send_btn.config(state=tk.NORMAL)

    def label_for(self, cid):
        return self.titles.get(cid) or f"(未命名) {cid[:8]}"

    def refresh_convs(self):
        self.call("list_conversations", on_ok=self.on_convs)

    def on_convs(self, convs):
        self.conv_ids = list(convs.keys())
        self.titles = {cid: c["title"] for cid, c in convs.items()}
        self.conv_list.delete(0, tk.END)
        for cid in self.conv_ids:
            self.conv_list.insert(tk.END, self.label_for(cid))
        if self.conv_id in self.conv_ids:
            self.conv_list.selection_set(self.conv_ids.index(self.conv_id))

    def create_conv(self):
        def done(conv):
            self.conv_id = conv["id"]
            self.chat.delete(1.0, tk.END)
            self.chat.insert(tk.END, "[系统] 新会话\n", "system")
            self.status.config(text=f"会话: {self.conv_id}")
            self.refresh_convs()
        self.call("new_conversation", on_ok=done)

    def on_select_conv(self, event):
        sel = self.conv_list.curselection()
        if not sel:
            return
        self.conv_id = self.conv_ids[sel[0]]
        self.title_entry.delete(0, tk.END)
        self.title_entry.insert(0, self.titles.get(self.conv_id, ""))
        self.call("get_conversation", self.conv_id, on_ok=self.show_conversation)

    def show_conversation(self, conv):
        self.chat.delete(1.0, tk.END)
        for m in conv["history"]:
            tag = m["role"] if m["role"] in ("user", "assistant") else "system"
            self.chat.insert(tk.END, f"{m['role']}: {m['content']}\n", tag)
        self.chat.see(tk.END)
        self.status.config(text=f"会话: {conv['id']}")

    def on_rename(self):
        if not self.conv_id:
            self.status.config(text="请先选择会话")
            return
        self.call("set_conversation_title", self.conv_id, self.title_entry.get().strip())

    def on_title_changed(self, payload):
        cid = payload["id"]
        self.titles[cid] = payload["new_title"]
        if cid in self.conv_ids:
            idx = self.conv_ids.index(cid)
            self.conv_list.delete(idx)
            self.conv_list.insert(idx, self.label_for(cid))
            if cid == self.conv_id:
                self.conv_list.selection_set(idx)
        else:
            self.refresh_convs()

    def on_send(self):
        if self.sending:
            return
        text = self.entry.get().strip()
        if not text or not self.conv_id:
            if not self.conv_id:
                self.status.config(text="请先新建或选择会话")
            return
        self.sending = True
        self.send_btn.config(state=tk.DISABLED)
        self.status.config(text="发送中...")
        self.chat.insert(tk.END, "[系统] 发送中...\n", "system")
        def done(conv):
            self.finish_sending()
            self.entry.delete(0, tk.END)
            if conv["id"] == self.conv_id:
                self.show_conversation(conv)
        self.call("send_message", self.conv_id, text, on_ok=done, on_err=self.finish_sending)

    def on_send_event(self, event):
        self.on_send()
        return "break"

    def on_greet(self):
        name = self.name_entry.get().strip()
        self.status.config(text="问候中...")
        def done(reply):
            self.chat.insert(tk.END, f"问候: {reply}\n", "assistant")
            self.chat.see(tk.END)
            self.status.config(text="准备就绪")
        self.call("greet", name, on_ok=done)

    def on_close(self):
        try:
            self.window_state.save(WindowState(geometry=self.root.geometry()))
        except Exception as e:
            logger.warning(f"Failed to save window state: {e}")
        self._unsubscribe()
        self.dispatcher.shutdown(wait=False)
        self.root.destroy()


def run_app(ctx: AppContext) -> None:
    root = tk.Tk()
    dispatcher = CommandDispatcher(ctx)
    App(root, ctx, dispatcher)
    root.mainloop()
