"""
Labeled walkthrough of delegation semantics.

Each section builds a small record hierarchy and prints what lookups return,
ending with the payload merge that ``safe_merge`` exists for. Output goes to
a Rich console so tests can capture it with ``Console(file=...)``.
"""

import typing as _typing

import rich.console as _rich_console
import rich.text as _rich_text

import protochain.delegation as delegation
import protochain.merge as merge
import protochain.payload as payload

_UNSAFE_PAYLOAD = '{"__proto__": {"polluted": "yes"}, "safe": 123}'


def _title(console: _rich_console.Console, title: str) -> None:
    console.print()
    console.rule(_rich_text.Text(title, style="bold cyan"))


def _line(console: _rich_console.Console, label: str, value: _typing.Any) -> None:
    line = _rich_text.Text(f"{label}: ", style="dim")
    line.append(repr(value))
    console.print(line)


def show_lookup(console: _rich_console.Console) -> None:
    _title(console, "1) Delegation chain lookup")
    base = delegation.create(kind="base", describe=lambda this: f"kind={this['kind']}")
    obj = delegation.create(base, kind="child")

    _line(console, "obj['kind'] (own)", obj["kind"])
    _line(console, "obj.invoke('describe') (from delegate)", obj.invoke("describe"))
    _line(console, "obj.has_own('describe')", obj.has_own("describe"))
    _line(console, "base.has_own('describe')", base.has_own("describe"))
    _line(console, "get_prototype_of(obj) is base", delegation.get_prototype_of(obj) is base)


def show_shadowing(console: _rich_console.Console) -> None:
    _title(console, "2) Shadowing delegate fields")
    base = delegation.create(kind="base", describe=lambda this: f"kind={this['kind']}")
    obj = delegation.create(base, kind="child")

    _line(console, "obj.invoke('describe')", obj.invoke("describe"))
    obj["describe"] = lambda this: f"own describe(): {this['kind']}"
    _line(console, "obj.invoke('describe') after shadow", obj.invoke("describe"))
    _line(console, "base.invoke('describe') still", base.invoke("describe"))


def show_shared_mutation(console: _rich_console.Console) -> None:
    _title(console, "3) Mutating a delegate affects every record using it")
    base = delegation.create(kind="base")
    a = delegation.create(base, kind="a")
    b = delegation.create(base, kind="b")

    base["shared"] = 1
    _line(console, "a['shared'] (inherited)", a["shared"])
    _line(console, "b['shared'] (inherited)", b["shared"])
    base["shared"] += 1
    _line(console, "a['shared'] after base['shared'] += 1", a["shared"])
    _line(console, "b['shared'] after base['shared'] += 1", b["shared"])


def show_constructors(console: _rich_console.Console) -> None:
    _title(console, "4) Constructor prototypes")
    person = delegation.RecordType("Person", lambda this, name: this.update(name=name))
    person.prototype["say"] = lambda this: f"Hi, I'm {this['name']}"
    p1 = person("Ada")
    p2 = person("Grace")

    _line(console, "p1.invoke('say')", p1.invoke("say"))
    _line(console, "p2.invoke('say')", p2.invoke("say"))
    _line(
        console,
        "get_prototype_of(p1) is Person.prototype",
        delegation.get_prototype_of(p1) is person.prototype,
    )
    _line(console, "p1.has_own('say')", p1.has_own("say"))

    person.prototype["say"] = lambda this: f"Hello from updated say(), {this['name']}"
    _line(console, "p1.invoke('say') after prototype change", p1.invoke("say"))
    _line(console, "p2.invoke('say') after prototype change", p2.invoke("say"))


def show_get_set_prototype(console: _rich_console.Console) -> None:
    _title(console, "5) Getting and setting delegates")
    proto1 = delegation.create(tag="proto1")
    proto2 = delegation.create(tag="proto2")
    x = delegation.create(proto1)

    _line(console, "get_prototype_of(x)['tag']", delegation.get_prototype_of(x)["tag"])
    delegation.set_prototype_of(x, proto2)
    _line(console, "after set_prototype_of, delegate tag", delegation.get_prototype_of(x)["tag"])


def show_subtypes(console: _rich_console.Console) -> None:
    _title(console, "6) Subtypes chain their prototypes")
    animal = delegation.RecordType("Animal", lambda this, name: this.update(name=name))
    animal.prototype["speak"] = lambda this: f"{this['name']} makes a noise"
    dog = animal.extend("Dog")
    dog.prototype["speak"] = lambda this: f"{this['name']} barks"
    rex = dog("Rex")

    _line(console, "rex.invoke('speak')", rex.invoke("speak"))
    _line(
        console,
        "get_prototype_of(Dog.prototype) is Animal.prototype",
        delegation.get_prototype_of(dog.prototype) is animal.prototype,
    )
    _line(console, "Animal.is_instance(rex)", animal.is_instance(rex))


def show_pollution(console: _rich_console.Console) -> None:
    _title(console, "7) Merging untrusted input")
    user_input = payload.parse_payload(_UNSAFE_PAYLOAD)
    _line(console, "payload keys", list(user_input))

    victim = merge.safe_merge(delegation.create(), user_input)
    skipped = [key for key in user_input if merge.is_reserved(key)]
    _line(console, "victim['safe']", victim["safe"])
    _line(console, "'polluted' in victim", "polluted" in victim)
    _line(console, "victim delegate is still the root", victim["__proto__"] is delegation.ROOT)
    _line(console, "'polluted' in create()", "polluted" in delegation.create())
    _line(console, "skipped keys", skipped)


SECTIONS: tuple[_typing.Callable[[_rich_console.Console], None], ...] = (
    show_lookup,
    show_shadowing,
    show_shared_mutation,
    show_constructors,
    show_get_set_prototype,
    show_subtypes,
    show_pollution,
)


def run_demo(console: _rich_console.Console) -> None:
    """Print every walkthrough section in order."""
    for section in SECTIONS:
        section(console)
    _title(console, "Done")
