"""
Country code to continent lookup.

Nominatim does not return a continent, so the top level of every chain is
derived from the ISO 3166-1 alpha-2 country code.
"""

from __future__ import annotations

AFRICA = "Africa"
ANTARCTICA = "Antarctica"
ASIA = "Asia"
EUROPE = "Europe"
NORTH_AMERICA = "North America"
OCEANIA = "Oceania"
SOUTH_AMERICA = "South America"

_CONTINENT_COUNTRIES: dict[str, str] = {
    AFRICA: (
        "ao bf bi bj bw cd cf cg ci cm cv dj dz eg eh er et ga gh gm gn gq gw ke km "
        "lr ls ly ma mg ml mr mu mw mz na ne ng re rw sc sd sh sl sn so ss st sz td "
        "tg tn tz ug yt za zm zw io"
    ),
    ANTARCTICA: "aq bv gs hm tf",
    ASIA: (
        "ae af am az bd bh bn bt cc cn cx cy ge hk id il in iq ir jo jp kg kh kp kr "
        "kw kz la lb lk mm mn mo mv my np om ph pk ps qa sa sg sy th tj tl tm tr tw "
        "uz vn ye"
    ),
    EUROPE: (
        "ad al at ax ba be bg by ch cz de dk ee es fi fo fr gb gg gi gr hr hu ie im "
        "is it je li lt lu lv mc md me mk mt nl no pl pt ro rs ru se si sj sk sm ua "
        "va xk"
    ),
    NORTH_AMERICA: (
        "ag ai aw bb bl bm bq bs bz ca cr cu cw dm do gd gl gp gt hn ht jm kn ky lc "
        "mf mq ms mx ni pa pm pr sv sx tc tt us vc vg vi"
    ),
    OCEANIA: "as au ck fj fm gu ki mh mp nc nf nr nu nz pf pg pn pw sb tk to tv um vu wf ws",
    SOUTH_AMERICA: "ar bo br cl co ec fk gf gy pe py sr uy ve",
}

COUNTRY_CODE_TO_CONTINENT: dict[str, str] = {
    code: continent
    for continent, codes in _CONTINENT_COUNTRIES.items()
    for code in codes.split()
}


def continent_for(country_code: str | None) -> str | None:
    """Return the continent for ``country_code`` or None when unknown."""
    if not country_code:
        return None
    return COUNTRY_CODE_TO_CONTINENT.get(country_code.strip().lower())
