from __future__ import annotations

import io
from datetime import date
from types import MappingProxyType

import pandas as pd

from netsheet.models import FeeSchedule, PremiumTierRow

DISCLAIMER = (
    "Estimate only. Actual prorations, premiums, recording charges, and settlement charges "
    "may differ based on county treasurer records, underwriting rules, and the final "
    "settlement statement."
)

# Owner's policy premium chart: liability range -> [min, max] premium.
OWNER_POLICY_RANGE_CSV = """
low,high,band_low,band_high
0,50000,209,220
50001,60000,225,263
60001,70000,268,306
70001,80000,311,349
80001,90000,353,392
90001,100000,396,435
100001,110000,438,462
110001,120000,465,490
120001,130000,493,517
130001,140000,520,545
140001,150000,548,572
150001,160000,575,600
160001,170000,603,627
170001,180000,630,655
180001,190000,658,682
190001,200000,685,710
200001,210000,713,737
210001,220000,740,765
220001,230000,768,792
230001,240000,795,820
240001,250000,823,847
250001,260000,850,875
260001,270000,878,902
270001,280000,905,930
280001,290000,933,957
290001,300000,960,985
300001,310000,988,1012
310001,320000,1015,1040
320001,330000,1043,1067
330001,340000,1070,1095
340001,350000,1098,1122
350001,360000,1125,1147
360001,370000,1150,1172
370001,380000,1174,1197
380001,390000,1199,1221
390001,400000,1224,1246
400001,410000,1249,1271
410001,420000,1273,1296
420001,430000,1298,1320
430001,440000,1323,1345
440001,450000,1348,1370
450001,460000,1372,1395
460001,470000,1397,1419
470001,480000,1422,1444
480001,490000,1447,1469
490001,500000,1471,1494
500001,510000,1496,1518
510001,520000,1521,1543
520001,530000,1546,1568
530001,540000,1570,1593
540001,550000,1595,1617
550001,560000,1620,1642
560001,570000,1645,1667
570001,580000,1669,1692
580001,590000,1694,1716
590001,600000,1719,1741
600001,610000,1743,1762
610001,620000,1764,1783
620001,630000,1785,1804
630001,640000,1806,1825
640001,650000,1827,1846
650001,660000,1848,1868
660001,670000,1869,1894
670001,680000,1890,1919
680001,690000,1911,1944
690001,700000,1931,1969
700001,710000,1952,1995
710001,720000,1973,2020
720001,730000,1994,2045
730001,740000,2015,2071
740001,750000,2036,2096
750001,760000,2057,2121
760001,770000,2078,2147
770001,780000,2099,2172
780001,790000,2120,2197
790001,800000,2140,2222
800001,810000,2161,2248
810001,820000,2182,2273
820001,830000,2203,2298
830001,840000,2224,2324
840001,850000,2245,2349
850001,860000,2266,2374
860001,870000,2287,2400
870001,880000,2308,2425
880001,890000,2329,2450
890001,900000,2349,2475
900001,910000,2370,2501
910001,920000,2391,2526
920001,930000,2412,2551
930001,940000,2433,2577
940001,950000,2454,2602
950001,960000,2475,2627
960001,970000,2496,2653
970001,980000,2517,2678
980001,990000,2538,2703
990001,1000000,2558,2728
"""

# Above the chart: the top row's high premium plus $22 for each started $10,000.
OVERFLOW_RATE = 22.0
OVERFLOW_UNIT = 10_000


def load_tier_table(csv_text: str) -> tuple[PremiumTierRow, ...]:
    """Parse a tier chart and check it is sorted with no overlaps.

    Printed charts use whole-dollar bounds (``50001`` follows ``50000``); a gap
    of at most one dollar between rows is treated as contiguous.
    """

    df = pd.read_csv(io.StringIO(csv_text.strip())).astype(float)
    if df.empty:
        raise ValueError("premium tier table is empty")
    if df["low"].iloc[0] != 0:
        raise ValueError("premium tier table must start at 0")
    gaps = df["low"].iloc[1:].to_numpy() - df["high"].iloc[:-1].to_numpy()
    if ((gaps <= 0) | (gaps > 1)).any():
        raise ValueError("premium tier rows must be ascending and contiguous")
    return tuple(PremiumTierRow(**rec) for rec in df.to_dict(orient="records"))


OWNER_POLICY_TABLE = load_tier_table(OWNER_POLICY_RANGE_CSV)
OVERFLOW_CEILING = OWNER_POLICY_TABLE[-1].high

IN_COUNTIES = (
    "Adams", "Allen", "Bartholomew", "Benton", "Blackford", "Boone", "Brown",
    "Carroll", "Cass", "Clark", "Clay", "Clinton", "Crawford", "Daviess",
    "Dearborn", "Decatur", "DeKalb", "Delaware", "Dubois", "Elkhart", "Fayette",
    "Floyd", "Fountain", "Franklin", "Fulton", "Gibson", "Grant", "Greene",
    "Hamilton", "Hancock", "Harrison", "Hendricks", "Henry", "Howard",
    "Huntington", "Jackson", "Jasper", "Jay", "Jefferson", "Jennings", "Johnson",
    "Knox", "Kosciusko", "LaGrange", "Lake", "LaPorte", "Lawrence", "Madison",
    "Marion", "Marshall", "Martin", "Miami", "Monroe", "Montgomery", "Morgan",
    "Newton", "Noble", "Ohio", "Orange", "Owen", "Parke", "Perry", "Pike",
    "Porter", "Posey", "Pulaski", "Putnam", "Randolph", "Ripley", "Rush",
    "St. Joseph", "Scott", "Shelby", "Spencer", "Starke", "Steuben", "Sullivan",
    "Switzerland", "Tippecanoe", "Tipton", "Union", "Vanderburgh", "Vermillion",
    "Vigo", "Wabash", "Warren", "Warrick", "Washington", "Wayne", "Wells",
    "White", "Whitley",
)

# Deed recording uses the higher fee in this county only.
PRIMARY_RECORDING_COUNTY = "Marion"

STANDARD_SCHEDULE = FeeSchedule(
    name="Standard",
    settlement_with_loan=390.0,
    settlement_cash=290.0,
    settlement_split=True,
    title_processing=175.0,
    closing_processing=150.0,
    cpl=25.0,
    tieff=5.0,
    deed_recording_primary=35.0,
    deed_recording_other=25.0,
    efile_per_doc=4.25,
    transfer_plus_sdf=30.0,
)

VALPARAISO_SCHEDULE = FeeSchedule(
    name="Valparaiso",
    settlement_with_loan=390.0,
    settlement_cash=290.0,
    settlement_split=True,
    title_processing=225.0,
    closing_processing=175.0,
    cpl=25.0,
    tieff=5.0,
    deed_recording_primary=35.0,
    deed_recording_other=25.0,
    efile_per_doc=4.25,
    transfer_plus_sdf=30.0,
    effective=date(2025, 9, 1),
)

FEE_SCHEDULES = MappingProxyType(
    {s.name.lower(): s for s in (STANDARD_SCHEDULE, VALPARAISO_SCHEDULE)}
)

# Counties closed out of the Valparaiso office, lower-cased for lookup.
SCHEDULE_OVERRIDES = MappingProxyType(
    {
        county.lower(): "valparaiso"
        for county in (
            "Lake",
            "Porter",
            "LaPorte",
            "St. Joseph",
            "Elkhart",
            "Kosciusko",
            "Marshall",
            "Fulton",
            "Pulaski",
            "Starke",
            "Jasper",
            "Newton",
            "White",
            "Cass",
        )
    }
)
