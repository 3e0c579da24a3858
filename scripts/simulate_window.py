#!/usr/bin/env python3
"""
Helper script to open a throwaway X11 window for trying out bouncer.
Usage:
    ./simulate_window.py "Class"
    ./simulate_window.py "instance|Class"

The window publishes _NET_WM_PID and honours WM_DELETE_WINDOW, so
`bouncer -d -p Class` should close it.
"""
import os
import sys

from Xlib import X, Xatom, display


def main():
    if len(sys.argv) < 2:
        print(f"Usage: {sys.argv[0]} <Window Class>")
        print("Example: ./simulate_window.py Firefox")
        print("Example: ./simulate_window.py 'navigator|Firefox'")
        sys.exit(1)

    parts = sys.argv[1].split("|", 1)
    instance, class_name = (parts[0], parts[1]) if len(parts) == 2 else (parts[0], parts[0])

    try:
        disp = display.Display()
    except Exception as e:
        print(f"Cannot open display: {e}")
        sys.exit(1)

    screen = disp.screen()
    win = screen.root.create_window(
        0, 0, 320, 120, 1, screen.root_depth,
        background_pixel=screen.white_pixel,
        event_mask=X.StructureNotifyMask,
    )
    win.set_wm_class(instance, class_name)
    win.set_wm_name(f"bouncer test window ({instance}|{class_name})")
    win.change_property(disp.intern_atom("_NET_WM_PID"), Xatom.CARDINAL, 32, [os.getpid()])

    wm_delete = disp.intern_atom("WM_DELETE_WINDOW")
    win.set_wm_protocols([wm_delete])
    win.map()
    disp.flush()
    print(f"Opened 0x{win.id:08x} as '{instance}|{class_name}' (pid {os.getpid()})")

    while True:
        event = disp.next_event()
        if event.type == X.ClientMessage and event.data[1][0] == wm_delete:
            print("Close requested, destroying window")
            win.destroy()
            disp.flush()
        elif event.type == X.DestroyNotify:
            break

    disp.close()


if __name__ == "__main__":
    main()
